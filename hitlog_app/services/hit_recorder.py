import ipaddress
from typing import Mapping, Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError

from hitlog_app.schemas.hit import HitCreate, DEFAULT_USER_AGENT
from hitlog_app.storage.strategies import HitStorageStrategy

log = structlog.get_logger(__name__)

UA_PREVIEW_LENGTH = 50


def resolve_client_ip(headers: Mapping[str, str], remote_addr: Optional[str]) -> str:
    """
    Pick the client address: X-Real-IP, then the first X-Forwarded-For
    entry, then the socket peer. First non-empty value wins.
    """
    real_ip = (headers.get("x-real-ip") or "").strip()
    if real_ip:
        return real_ip
    forwarded = (headers.get("x-forwarded-for") or "").split(",")[0].strip()
    if forwarded:
        return forwarded
    return (remote_addr or "").strip()


class HitRecorder:
    """
    Records one hit per tracked request.
    
    record() never raises: validation and storage problems are logged and
    reported as False, so the visitor still gets redirected.
    """
    
    def __init__(self, storage: HitStorageStrategy):
        self.storage = storage

    def record(self, headers: Mapping[str, str], remote_addr: Optional[str]) -> bool:
        """
        Validate, normalize and store a hit.
        
        Args:
            headers: Request headers (case-insensitive mapping, lowercase keys)
            remote_addr: Socket peer address
            
        Returns:
            True if a hit was stored, False otherwise
        """
        try:
            ip = resolve_client_ip(headers, remote_addr)
            if not ip:
                log.warning("hit_rejected", reason="missing_ip")
                return False
            try:
                ipaddress.ip_address(ip)
            except ValueError:
                log.warning("hit_rejected", reason="invalid_ip", ip=ip)
                return False

            hit = HitCreate(
                ip=ip,
                user_agent=headers.get("user-agent", DEFAULT_USER_AGENT),
                referer=headers.get("referer", ""),
                host=headers.get("host") or "",
            )
            self.storage.insert_hit(hit)

            log.info("hit_logged", ip=hit.ip, host=hit.host, ua=hit.user_agent[:UA_PREVIEW_LENGTH])
            return True
        except SQLAlchemyError as e:
            log.error("hit_storage_error", error=str(e))
            return False
        except Exception as e:
            log.error("hit_unexpected_error", error_type=type(e).__name__, error=str(e))
            return False

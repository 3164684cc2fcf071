"""
Health check utilities for the DocAI document chat service

Reports on the remote object store, the generative AI client, the session
store and the host's memory and disk.
"""
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import psutil

from services.gemini_client import GeminiClient
from services.object_store import ObjectStoreInterface
from services.session_store import SessionStoreInterface

logger = logging.getLogger(__name__)


def _now() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


class HealthStatus(Enum):
    """Health status enumeration"""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"
    UNKNOWN = "unknown"


@dataclass
class ComponentHealth:
    """Health information for a system component"""
    name: str
    status: HealthStatus
    message: str
    details: Optional[Dict[str, Any]] = None
    response_time_ms: Optional[int] = None
    last_check: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status.value,
            "message": self.message,
            "details": self.details,
            "response_time_ms": self.response_time_ms,
            "last_check": self.last_check
        }


@dataclass
class SystemHealth:
    """Overall system health information"""
    status: HealthStatus
    message: str
    components: List[ComponentHealth]
    timestamp: str
    uptime_seconds: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "message": self.message,
            "timestamp": self.timestamp,
            "uptime_seconds": self.uptime_seconds,
            "components": [component.to_dict() for component in self.components]
        }


class HealthChecker:
    """
    Health checker for all system components
    """

    def __init__(
        self,
        object_store: Optional[ObjectStoreInterface] = None,
        gemini_client: Optional[GeminiClient] = None,
        session_store: Optional[SessionStoreInterface] = None,
        usage_warning_percent: float = 80.0,
        usage_critical_percent: float = 90.0
    ):
        """
        Initialize health checker with system components

        Args:
            object_store: Remote object store instance
            gemini_client: Generative AI client instance
            session_store: Session store instance
            usage_warning_percent: Memory/disk usage reported as degraded
            usage_critical_percent: Memory/disk usage reported as unhealthy
        """
        self.object_store = object_store
        self.gemini_client = gemini_client
        self.session_store = session_store
        self.usage_warning_percent = usage_warning_percent
        self.usage_critical_percent = usage_critical_percent
        self.start_time = time.time()

    async def check_system_health(self, include_details: bool = True) -> SystemHealth:
        """
        Check the health of all system components

        Args:
            include_details: Whether to include detailed component information

        Returns:
            SystemHealth object with overall status and component details
        """
        components = []

        if self.object_store:
            components.append(self._check_object_store())

        if self.gemini_client:
            components.append(self._check_gemini_client())

        if self.session_store:
            components.append(self._check_session_store())

        components.append(self._check_memory_usage())
        components.append(self._check_disk_space())

        overall_status = self._determine_overall_status(components)

        return SystemHealth(
            status=overall_status,
            message=self._get_status_message(overall_status, components),
            components=components if include_details else [],
            timestamp=_now(),
            uptime_seconds=int(time.time() - self.start_time)
        )

    def _timed_check(self, name: str, check: Callable[[], ComponentHealth]) -> ComponentHealth:
        """Run a component check, recording its duration and turning errors into UNHEALTHY"""
        start_time = time.time()

        try:
            result = check()
        except Exception as e:
            logger.warning(f"Health check for {name} failed: {e}")
            result = ComponentHealth(
                name=name,
                status=HealthStatus.UNHEALTHY,
                message=f"{name} check failed: {str(e)}"
            )

        result.response_time_ms = int((time.time() - start_time) * 1000)
        result.last_check = _now()
        return result

    def _check_object_store(self) -> ComponentHealth:
        """Check object store configuration"""
        def check():
            stats = self.object_store.get_stats()
            if not self.object_store.is_available():
                return ComponentHealth(
                    name="object_store",
                    status=HealthStatus.UNHEALTHY,
                    message="Object store is not configured - missing bucket name",
                    details=stats
                )
            return ComponentHealth(
                name="object_store",
                status=HealthStatus.HEALTHY,
                message="Object store is configured",
                details=stats
            )

        return self._timed_check("object_store", check)

    def _check_gemini_client(self) -> ComponentHealth:
        """Check generative AI client configuration without calling the API"""
        def check():
            model_info = self.gemini_client.get_model_info()
            if not self.gemini_client.is_available():
                return ComponentHealth(
                    name="generative_ai",
                    status=HealthStatus.UNHEALTHY,
                    message="Generative AI service is not available - missing API key",
                    details=model_info
                )
            return ComponentHealth(
                name="generative_ai",
                status=HealthStatus.HEALTHY,
                message="Generative AI service is configured",
                details=model_info
            )

        return self._timed_check("generative_ai", check)

    def _check_session_store(self) -> ComponentHealth:
        def check():
            return ComponentHealth(
                name="session_store",
                status=HealthStatus.HEALTHY,
                message="Session store is accessible",
                details=self.session_store.get_stats()
            )

        return self._timed_check("session_store", check)

    def _usage_status(self, label: str, percent: float):
        if percent < self.usage_warning_percent:
            return HealthStatus.HEALTHY, f"{label} usage is normal ({percent:.1f}%)"
        if percent < self.usage_critical_percent:
            return HealthStatus.DEGRADED, f"{label} usage is high ({percent:.1f}%)"
        return HealthStatus.UNHEALTHY, f"{label} usage is critical ({percent:.1f}%)"

    def _check_memory_usage(self) -> ComponentHealth:
        """Check system memory usage"""
        def check():
            memory = psutil.virtual_memory()
            status, message = self._usage_status("Memory", memory.percent)
            return ComponentHealth(
                name="memory",
                status=status,
                message=message,
                details={
                    "total_gb": round(memory.total / (1024**3), 2),
                    "available_gb": round(memory.available / (1024**3), 2),
                    "used_percent": memory.percent
                }
            )

        return self._timed_check("memory", check)

    def _check_disk_space(self) -> ComponentHealth:
        """Check disk space usage"""
        def check():
            disk = psutil.disk_usage('/')
            disk_percent = (disk.used / disk.total) * 100
            status, message = self._usage_status("Disk", disk_percent)
            return ComponentHealth(
                name="disk",
                status=status,
                message=message,
                details={
                    "total_gb": round(disk.total / (1024**3), 2),
                    "free_gb": round(disk.free / (1024**3), 2),
                    "used_percent": round(disk_percent, 1)
                }
            )

        return self._timed_check("disk", check)

    def _determine_overall_status(self, components: List[ComponentHealth]) -> HealthStatus:
        """Determine overall system status based on component health"""
        statuses = {c.status for c in components}

        if not statuses:
            return HealthStatus.UNKNOWN
        if HealthStatus.UNHEALTHY in statuses:
            return HealthStatus.UNHEALTHY
        if HealthStatus.DEGRADED in statuses:
            return HealthStatus.DEGRADED
        if HealthStatus.HEALTHY in statuses:
            return HealthStatus.HEALTHY
        return HealthStatus.UNKNOWN

    def _get_status_message(self, status: HealthStatus, components: List[ComponentHealth]) -> str:
        """Get a descriptive message for the overall status"""
        if status == HealthStatus.HEALTHY:
            return f"All {len(components)} system components are healthy"
        elif status == HealthStatus.DEGRADED:
            degraded = [c.name for c in components if c.status == HealthStatus.DEGRADED]
            return f"System is degraded - issues with: {', '.join(degraded)}"
        elif status == HealthStatus.UNHEALTHY:
            unhealthy = [c.name for c in components if c.status == HealthStatus.UNHEALTHY]
            return f"System is unhealthy - critical issues with: {', '.join(unhealthy)}"
        else:
            return "System status is unknown"


def is_service_ready(
    object_store: Optional[ObjectStoreInterface] = None,
    gemini_client: Optional[GeminiClient] = None
) -> bool:
    """
    Check if the service is ready to handle requests

    Args:
        object_store: Remote object store instance
        gemini_client: Generative AI client instance

    Returns:
        True if every supplied component is configured
    """
    if object_store is None or gemini_client is None:
        return False

    return object_store.is_available() and gemini_client.is_available()

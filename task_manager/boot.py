"""
Startup validation.

Used by:
1. Application startup (main.py lifespan) -> mode="critical"
2. CI / deploy scripts -> mode="dry-run" (python -m task_manager.boot --mode dry-run)
3. Local setup -> python -m task_manager.boot --mode critical --create-schema
"""

import asyncio
import sys
import time
from dataclasses import dataclass
from enum import Enum

from task_manager.config import mask_database_url, settings
from task_manager.database import PoolOptions, gateway
from task_manager.logger import elapsed_ms, get_logger

logger = get_logger(__name__)


class BootMode(str, Enum):
    CRITICAL = "critical"  # Config + DB pool (fail fast on startup)
    DRY_RUN = "dry-run"  # Static config check only


@dataclass
class ServiceStatus:
    service: str
    status: str  # 'ok', 'error'
    message: str
    duration_ms: float = 0.0


class Bootloader:
    """Handles environment validation and storage initialization."""

    @staticmethod
    async def validate(mode: BootMode = BootMode.CRITICAL) -> bool:
        """Run validation checks. Returns True if passed, False if failed.

        If mode is CRITICAL, this calls sys.exit(1) on failure.
        """
        logger.info("Bootloader starting validation", mode=mode.value)

        if not Bootloader._check_static_config():
            if mode == BootMode.CRITICAL:
                logger.critical("Static configuration check failed. Refusing to start.")
                sys.exit(1)
            return False

        if mode == BootMode.DRY_RUN:
            logger.info("Dry-run configuration check passed")
            return True

        res = await Bootloader._check_database()
        if res.status == "error":
            logger.error(
                "Service check failed",
                service=res.service,
                error=res.message,
                duration_ms=res.duration_ms,
            )
            logger.critical("Critical service checks failed. Application cannot start.")
            sys.exit(1)

        logger.info("Service check passed", service=res.service, duration_ms=res.duration_ms)
        logger.info("Bootloader validation successful")
        return True

    @staticmethod
    def print_config() -> None:
        """Log the loaded configuration when DEBUG is enabled."""
        if not settings.debug:
            return

        safe_fields = [
            "environment",
            "host",
            "port",
            "jwt_algorithm",
            "access_token_expire_minutes",
            "bcrypt_rounds",
            "db_max_open_connections",
            "db_max_idle_connections",
            "db_connection_max_lifetime",
            "read_timeout_seconds",
            "registration_timeout_seconds",
        ]
        config = {field: getattr(settings, field) for field in safe_fields}
        config["database_url"] = mask_database_url(settings.database_url)
        config["jwt_secret"] = "set" if settings.jwt_secret else "not set"
        logger.info("Config loaded (DEBUG mode)", **config)

    @staticmethod
    def _check_static_config() -> bool:
        """Verify the signing secret and database descriptor."""
        ok = True
        problem = settings.jwt_secret_problem()
        if problem:
            logger.error("Configuration invalid", field="JWT_SECRET", error=problem)
            ok = False
        if not settings.database_url:
            logger.error("Configuration invalid", field="DATABASE_URL", error="DATABASE_URL is not set")
            ok = False
        try:
            PoolOptions.from_settings()
        except ValueError as e:
            logger.error("Configuration invalid", field="DB_POOL", error=str(e))
            ok = False
        return ok

    @staticmethod
    async def _check_database() -> ServiceStatus:
        """Open the shared pool; initialization pings the backend."""
        start = time.perf_counter()
        try:
            await gateway.initialize(settings.database_url, PoolOptions.from_settings())
        except Exception as e:
            return ServiceStatus("database", "error", str(e), elapsed_ms(start))

        return ServiceStatus("database", "ok", "Connection successful", elapsed_ms(start))


if __name__ == "__main__":
    import argparse

    from task_manager.logger import configure_logging

    parser = argparse.ArgumentParser()
    parser.add_argument("--mode", type=str, default="dry-run", choices=["critical", "dry-run"])
    parser.add_argument(
        "--create-schema",
        action="store_true",
        help="Create missing tables after a successful critical check",
    )
    args = parser.parse_args()
    if args.create_schema and args.mode != BootMode.CRITICAL.value:
        parser.error("--create-schema needs --mode critical")

    configure_logging()

    async def _run(mode: BootMode, create_schema: bool) -> bool:
        try:
            ok = await Bootloader.validate(mode)
            if ok and create_schema:
                await gateway.create_schema()
                logger.info("Schema created")
            return ok
        finally:
            await gateway.shutdown()

    try:
        success = asyncio.run(_run(BootMode(args.mode), args.create_schema))
    except KeyboardInterrupt:
        sys.exit(130)

    sys.exit(0 if success else 1)

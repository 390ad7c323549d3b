"""Default configuration parameters for the validation client."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class AccountTemplate:
    """Account entry written into a freshly created config file."""
    region: str = "ap-northeast-1"
    clientId: str = "5msns4n49hmg3dftp2tp1t2iuh"
    userPoolId: str = "ap-northeast-1_M22I44OpC"
    username: str = ""
    password: str = ""
    maxProxies: int = 1


@dataclass(frozen=True)
class StorkParams:
    """Remote oracle API parameters."""
    baseURL: str = "https://app-api.jp.stork-oracle.network/v1"
    authURL: str = "https://api.jp.stork-oracle.network/auth"
    intervalSeconds: int = 10                        # Validation cycle period
    requestTimeoutSeconds: int = 30
    userAgent: str = "Mozilla/5.0 (Node)"
    origin: str = "chrome-extension://knnliglhgkmlblppdejchidfihjnockl"
    statsPerValidation: bool = False                 # Fetch points after every report


@dataclass(frozen=True)
class ThreadParams:
    """Dispatch fan-out parameters."""
    maxWorkers: int = 10


@dataclass(frozen=True)
class SessionParams:
    """Session persistence and rotation parameters."""
    directory: str = "."
    rotationSeconds: int = 3600                      # Forced re-authentication period


@dataclass(frozen=True)
class ValidationParams:
    """Local validation parameters."""
    freshnessSeconds: int = 3600                     # Max signature age


@dataclass(frozen=True)
class ProxyParams:
    """Proxy pool source parameters."""
    file: str = "proxies.txt"


@dataclass(frozen=True)
class LoggingParams:
    """Logging output parameters."""
    level: str = "INFO"
    json: bool = False


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    stork: StorkParams
    threads: ThreadParams
    session: SessionParams
    validation: ValidationParams
    proxies: ProxyParams
    logging: LoggingParams
    accounts: list = field(default_factory=list)


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        stork=StorkParams(),
        threads=ThreadParams(),
        session=SessionParams(),
        validation=ValidationParams(),
        proxies=ProxyParams(),
        logging=LoggingParams(),
    )

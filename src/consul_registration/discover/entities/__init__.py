from .service_descriptor import (
    HealthCheckSpec,
    HttpCheck,
    ServiceDescriptor,
    TtlCheck,
)

__all__ = [
    "HealthCheckSpec",
    "HttpCheck",
    "ServiceDescriptor",
    "TtlCheck",
]

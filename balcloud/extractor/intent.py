"""
Deployment-intent model produced by the extractor.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple


@dataclass
class SecureSocketConfig:
    cert_file: Optional[str] = None
    key_file: Optional[str] = None
    path: Optional[str] = None  # key store

    def files(self) -> List[str]:
        return [p for p in (self.cert_file, self.key_file, self.path) if p]


@dataclass
class MutualSSLConfig:
    path: Optional[str] = None


@dataclass
class Config:
    """``secureSocket`` block of a listener configuration."""
    secure_socket: Optional[SecureSocketConfig] = None
    mutual_ssl: Optional[MutualSSLConfig] = None

    def files(self) -> List[str]:
        paths: List[str] = []
        if self.secure_socket:
            paths.extend(self.secure_socket.files())
        if self.mutual_ssl and self.mutual_ssl.path:
            paths.append(self.mutual_ssl.path)
        return paths


@dataclass
class ListenerInfo:
    name: str
    port: int = 0
    config: Optional[Config] = None
    port_ref: Optional[str] = None  # name used for the port when it is not a literal


@dataclass
class ResourceInfo:
    method: str
    path: str


@dataclass
class ServiceInfo:
    listener: ListenerInfo
    service_path: str
    resources: List[ResourceInfo] = field(default_factory=list)

    def add_resource(self, resource: ResourceInfo) -> None:
        self.resources.append(resource)


@dataclass
class Task:
    minutes: Optional[str] = None
    hours: Optional[str] = None
    day_of_month: Optional[str] = None
    month_of_year: Optional[str] = None
    days_of_week: Optional[str] = None

    def to_cron(self) -> str:
        fields = (self.minutes, self.hours, self.day_of_month, self.month_of_year, self.days_of_week)
        return " ".join(f if f else "*" for f in fields)


@dataclass(frozen=True)
class DeploymentIntent:
    listeners: Tuple[ListenerInfo, ...] = ()
    services: Tuple[ServiceInfo, ...] = ()
    listener_configs: Mapping[str, Config] = field(default_factory=dict)
    task: Optional[Task] = None
    int_constants: Mapping[str, int] = field(default_factory=dict)

    def tls_configs(self) -> Dict[str, Config]:
        """TLS configs keyed by the listener that carries them."""
        configs: Dict[str, Config] = {}
        for listener in self.listeners:
            if listener.config is not None:
                configs.setdefault(listener.name, listener.config)
        for service in self.services:
            if service.listener.config is not None:
                configs.setdefault(service.listener.name, service.listener.config)
        return configs

    def to_dict(self) -> Dict:
        return {
            "listeners": [asdict(l) for l in self.listeners],
            "services": [asdict(s) for s in self.services],
            "listener_configs": {k: asdict(v) for k, v in self.listener_configs.items()},
            "task": asdict(self.task) if self.task else None,
            "int_constants": dict(self.int_constants),
        }

"""
Host statistics record model.

A HostStat is one observation of a single physical host. Its flattening into
a row and the header row are both driven by the FIELDS table below, so the
column order is declared exactly once.
"""

from dataclasses import dataclass
from typing import Callable, List, NamedTuple


BYTE_UNITS = {
    'B': 1,
    'KB': 1024,
    'MB': 1024 ** 2,
    'GB': 1024 ** 3,
    'TB': 1024 ** 4,
}

_DISPLAY_UNITS = [
    ('EB', 1024 ** 6),
    ('PB', 1024 ** 5),
    ('TB', 1024 ** 4),
    ('GB', 1024 ** 3),
    ('MB', 1024 ** 2),
    ('KB', 1024),
]


def normalize_to_bytes(value: int, unit: str) -> int:
    """Convert a size expressed in a binary unit (B, KB, MB, GB, TB) to bytes.

    Raises:
        ValueError: If the unit is not recognised.
    """
    try:
        multiplier = BYTE_UNITS[unit.upper()]
    except KeyError:
        raise ValueError(f"Unknown memory unit: {unit!r}") from None
    return int(value) * multiplier


def format_bytes(value: int) -> str:
    """Render a byte count in binary units with one decimal.

    Example:
        >>> format_bytes(1024 ** 3)
        '1.0GB'
        >>> format_bytes(512)
        '512B'
    """
    magnitude = abs(value)
    for unit, size in _DISPLAY_UNITS:
        if magnitude >= size:
            return f"{value / size:.1f}{unit}"
    return f"{value}B"


@dataclass(frozen=True)
class HostStat:
    """Capacity and identity of one physical host.

    CPU figures are in MHz, memory figures in bytes.
    """
    cluster: str
    host: str
    version: str
    build: str
    vendor: str
    model: str
    num_cpu_pkgs: int
    num_cpu_cores: int
    num_cpu_threads: int
    cpu_model: str
    total_cpu: int
    free_cpu: int
    memory_size: int
    memory_usage: int
    free_memory: int

    @classmethod
    def from_usage(cls, *, cluster: str, host: str, version: str, build: str,
                   vendor: str, model: str, num_cpu_pkgs: int, num_cpu_cores: int,
                   num_cpu_threads: int, cpu_model: str, cpu_mhz: int,
                   cpu_usage_mhz: int, memory_size: int, memory_usage: int,
                   memory_usage_unit: str = 'B') -> 'HostStat':
        """Build a record from raw capacity and usage figures.

        Total CPU is the per-core clock times the core count. Memory usage is
        normalised to bytes before the free memory is derived.
        """
        total_cpu = int(cpu_mhz) * int(num_cpu_cores)
        used_memory = normalize_to_bytes(memory_usage, memory_usage_unit)
        return cls(
            cluster=cluster,
            host=host,
            version=version,
            build=build,
            vendor=vendor,
            model=model,
            num_cpu_pkgs=int(num_cpu_pkgs),
            num_cpu_cores=int(num_cpu_cores),
            num_cpu_threads=int(num_cpu_threads),
            cpu_model=cpu_model,
            total_cpu=total_cpu,
            free_cpu=total_cpu - int(cpu_usage_mhz),
            memory_size=int(memory_size),
            memory_usage=used_memory,
            free_memory=int(memory_size) - used_memory,
        )


class Field(NamedTuple):
    attribute: str
    header: str
    render: Callable[[object], str]


def _text(value) -> str:
    return '' if value is None else str(value)


def _integer(value) -> str:
    return str(int(value))


FIELDS: List[Field] = [
    Field('cluster', 'Cluster', _text),
    Field('host', 'Host', _text),
    Field('version', 'Version', _text),
    Field('build', 'Build', _text),
    Field('vendor', 'Vendor', _text),
    Field('model', 'Model', _text),
    Field('num_cpu_pkgs', 'NumCpuPkgs', _integer),
    Field('num_cpu_cores', 'NumCpuCores', _integer),
    Field('num_cpu_threads', 'NumCpuThreads', _integer),
    Field('cpu_model', 'CpuModel', _text),
    Field('total_cpu', 'TotalCPU', _integer),
    Field('free_cpu', 'FreeCPU', _integer),
    Field('memory_size', 'MemorySize', format_bytes),
    Field('memory_usage', 'OverallMemoryUsage', format_bytes),
    Field('free_memory', 'FreeMemory', format_bytes),
]

_HEADERS = [f.header for f in FIELDS]


def headers() -> List[str]:
    """Return the header row, in the same order as flatten()."""
    return list(_HEADERS)


def flatten(record: HostStat) -> List[str]:
    """Render a record as a row of strings in header order."""
    return [f.render(getattr(record, f.attribute)) for f in FIELDS]

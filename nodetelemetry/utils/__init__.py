# Node Telemetry utils subpackage
from .console import Console

__all__ = ['Console']

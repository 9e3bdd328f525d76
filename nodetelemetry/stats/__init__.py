# Node Telemetry stats subpackage
from .bandwidth import BandwidthWindow

__all__ = ['BandwidthWindow']

"""
Error taxonomy for speaker discovery and network lookups
"""


class SpeakerNetworkError(Exception):
    """Base class for all speaker network errors"""


class TransportError(SpeakerNetworkError):
    """Multicast socket could not be created, configured or used"""


class NoDevicesFoundError(SpeakerNetworkError):
    """Discovery pass returned no devices"""

    def __init__(self, message: str = "No devices found on the current network"):
        super().__init__(message)


class NoControllersError(SpeakerNetworkError):
    """Topology produced zero coordinators"""

    def __init__(self, message: str = "No controllers found on the current network"):
        super().__init__(message)


class NotFoundError(SpeakerNetworkError):
    """No entity matches a name-based lookup"""


class DeviceRequestError(SpeakerNetworkError):
    """HTTP or SOAP request to a speaker failed"""

    def __init__(self, ip: str, message: str):
        self.ip = ip
        super().__init__(f"Request to {ip} failed: {message}")

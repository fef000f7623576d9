from abc import ABC, abstractmethod
import logging
from typing import Any, List, Optional

from numpy.typing import NDArray

__all__ = ["CpuDevice", "CudaDevice", "Device", "default_device", "make_device"]


class Device(ABC):
    """Description of a device on which the metric kernels are executed.

    The device is allowed to be the same as the host (so that code is executed on the host). In such
    a case, most operations do nothing.
    """

    def __init__(self, xp, xalg) -> None:
        """Set the array module (`xp`) and its scipy equivalent (`xalg`), so that callers can
        write device-agnostic code."""
        self.xp = xp
        self.xalg = xalg

    @abstractmethod
    def __synchronize__(self, **kwargs):
        pass

    def synchronize(self, **kwargs):
        """Synchronize this device with the host. This is essentially a host-device barrier."""
        self.__synchronize__(**kwargs)

    @abstractmethod
    def __array__(self, a: NDArray, **kwargs) -> NDArray:
        pass

    def array(self, a: NDArray, *args, **kwargs) -> NDArray:
        """Copy the given array to this device, if it's not the same as the host."""
        return self.__array__(a, *args, **kwargs)

    @abstractmethod
    def __to_host__(self, val, **kwargs):
        pass

    def to_host(self, val: Any, **kwargs) -> Any:
        """Copy the given array to the host (if it's not there already)."""
        return self.__to_host__(val, **kwargs)


class CpuDevice(Device):
    def __init__(self) -> None:
        import numpy
        import scipy
        import scipy.linalg

        super().__init__(numpy, scipy)

    def __synchronize__(self, **kwargs):
        """Nothing to do, the host is always in sync with itself."""

    def __array__(self, a: NDArray, *args, **kwargs) -> NDArray:
        """Return the input as a numpy array, without copying when possible."""
        return self.xp.asarray(a, *args, **kwargs)

    def __to_host__(self, val, **kwargs):
        """Return the input unchanged."""
        return val


class CudaDevice(Device):
    def __init__(self, device_list: Optional[List[int]] = None) -> None:
        # Delay imports, to avoid loading CUDA if not asked
        import cupy
        import cupyx
        import cupyx.scipy.linalg

        super().__init__(cupy, cupyx.scipy)

        num_devices = cupy.cuda.runtime.getDeviceCount()
        if num_devices == 0:
            raise ValueError("Unable to create a CudaDevice object, no GPU devices were detected")

        device_list = [x for x in (device_list or []) if x < num_devices]
        if not device_list:
            device_list = list(range(num_devices))

        cupy.cuda.Device(device_list[0]).use()
        self.main_stream = cupy.cuda.get_current_stream()

    def __synchronize__(self, **kwargs):
        self.main_stream.synchronize()

    def __array__(self, a: NDArray, *args, **kwargs) -> NDArray:
        """Copy given array to the device."""
        return self.xp.asarray(a, *args, **kwargs)

    def __to_host__(self, val, **kwargs):
        """Copy given array to the host."""
        return val.get(**kwargs)


def make_device(desired_device: str) -> Device:
    """Create the device requested in the configuration."""
    if desired_device == "cpu":
        return default_device
    if desired_device == "cuda":
        logging.info("Running metric kernels on a CUDA device")
        return CudaDevice()
    raise ValueError(f"Unknown device '{desired_device}'")


default_device = CpuDevice()

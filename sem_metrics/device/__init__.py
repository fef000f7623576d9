from .device import CpuDevice, CudaDevice, Device, default_device, make_device

__all__ = ["CpuDevice", "CudaDevice", "Device", "default_device", "make_device"]

from .fakes import FakeRemotePort, device_remote
from .paramiko_ssh import ParamikoRemote

__all__ = ["ParamikoRemote", "FakeRemotePort", "device_remote"]

from __future__ import annotations

from adapters.decode import FfmpegFrameDecoder, NumpyFrameDecoder
from adapters.image_store import FileImageSink
from adapters.remote_ssh import ParamikoRemote
from adapters.time import SystemClockPort
from domain.snap import DeviceProfile, SnapService
from ports.decoder import FrameDecoderPort
from ports.remote import RemoteExecPort
from ports.storage import ImageSinkPort
from ports.time import ClockPort

from apps.snap.settings import SnapSettings


def build_remote(settings: SnapSettings) -> RemoteExecPort:
    ssh = settings.ssh
    return ParamikoRemote(
        host=settings.host,
        username=ssh.username,
        port=ssh.port,
        password=ssh.password,
        key_filename=ssh.key_filename,
        connect_timeout=ssh.connect_timeout,
        command_timeout=ssh.command_timeout,
        auto_add_host_keys=ssh.auto_add_host_keys,
    )


def build_decoder(settings: SnapSettings) -> FrameDecoderPort:
    dec = settings.decode
    if dec.adapter == "ffmpeg":
        return FfmpegFrameDecoder(
            ffmpeg_bin=dec.ffmpeg_bin, workdir=settings.output_dir, timeout_s=dec.timeout_s
        )
    if dec.adapter == "numpy":
        return NumpyFrameDecoder()
    raise ValueError(f"Unknown decoder adapter: {dec.adapter}")


def build_device(settings: SnapSettings) -> DeviceProfile:
    dev = settings.device
    return DeviceProfile(
        process_name=dev.process_name,
        device_path=dev.device_path,
        mapping_pick=dev.mapping_pick,
        geometry=dev.geometry(),
    )


def build_service(
    settings: SnapSettings,
    remote: RemoteExecPort | None = None,
    decoder: FrameDecoderPort | None = None,
    sink: ImageSinkPort | None = None,
    clock: ClockPort | None = None,
) -> SnapService:
    """Wire a SnapService from settings; any port may be swapped in (tests)."""
    return SnapService(
        remote=remote or build_remote(settings),
        decoder=decoder or build_decoder(settings),
        sink=sink or FileImageSink(settings.output_dir),
        clock=clock or SystemClockPort(),
        device=build_device(settings),
        corrections=settings.decode.corrections(),
        extract=settings.extract.config(),
        keep_full=settings.keep_full,
    )

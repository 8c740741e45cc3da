import random
import secrets
import time
from typing import Callable, Dict

from pydantic import BaseModel, ConfigDict

from ttresolve.models.internal import ClientIdentity
from ttresolve.utils.hash import md5_hex


class ImpersonationProfile(BaseModel):
    """Fixed app build, device model and locale presented to the API"""
    model_config = ConfigDict(frozen=True)

    aid: str = "1233"
    app_name: str = "musical_ly"
    app_version: str = "35.1.3"
    manifest_app_version: str = "2023501030"
    device_platform: str = "android"
    os: str = "android"
    ssmix: str = "a"
    channel: str = "googleplay"
    resolution: str = "1080*2400"
    dpi: str = "420"
    device_type: str = "Pixel 7"
    device_brand: str = "Google"
    language: str = "en"
    os_api: str = "29"
    os_version: str = "13"
    ac: str = "wifi"
    is_pad: str = "0"
    current_region: str = "US"
    app_type: str = "normal"
    sys_region: str = "US"
    timezone_name: str = "America/New_York"
    residence: str = "US"
    app_language: str = "en"
    timezone_offset: str = "-14400"
    host_abi: str = "armeabi-v7a"
    locale: str = "en"
    ac2: str = "wifi5g"
    uoo: str = "1"
    carrier_region: str = "US"
    op_region: str = "US"
    region: str = "US"

    @property
    def version_code(self) -> str:
        """35.1.3 -> 350103"""
        return "".join(f"{int(part):02d}" for part in self.app_version.split("."))

    def static_fields(self) -> Dict[str, str]:
        return {
            "device_platform": self.device_platform,
            "os": self.os,
            "ssmix": self.ssmix,
            "channel": self.channel,
            "aid": self.aid,
            "app_name": self.app_name,
            "version_code": self.version_code,
            "version_name": self.app_version,
            "manifest_version_code": self.manifest_app_version,
            "update_version_code": self.manifest_app_version,
            "ab_version": self.app_version,
            "resolution": self.resolution,
            "dpi": self.dpi,
            "device_type": self.device_type,
            "device_brand": self.device_brand,
            "language": self.language,
            "os_api": self.os_api,
            "os_version": self.os_version,
            "ac": self.ac,
            "is_pad": self.is_pad,
            "current_region": self.current_region,
            "app_type": self.app_type,
            "sys_region": self.sys_region,
            "timezone_name": self.timezone_name,
            "residence": self.residence,
            "app_language": self.app_language,
            "timezone_offset": self.timezone_offset,
            "host_abi": self.host_abi,
            "locale": self.locale,
            "ac2": self.ac2,
            "uoo": self.uoo,
            "carrier_region": self.carrier_region,
            "op_region": self.op_region,
            "build_number": self.app_version,
            "region": self.region,
        }


DEFAULT_PROFILE = ImpersonationProfile()


class IdentityGenerator:
    """
    Builds a fresh synthetic install for every API call.

    The identifiers only have to look plausible to naive fingerprinting;
    nothing here is a security boundary.
    """

    def __init__(
        self,
        profile: ImpersonationProfile = DEFAULT_PROFILE,
        clock: Callable[[], float] = time.time,
    ):
        self.profile = profile
        self.clock = clock

    def generate(self) -> ClientIdentity:
        now = self.clock()
        now_ms = int(now * 1000)

        device_id = md5_hex(str(now_ms + random.random()))
        client_descriptor_id = md5_hex(f"{now_ms}{random.random()}")
        install_id = secrets.token_hex(8)

        params = {
            **self.profile.static_fields(),
            "_rticket": str(now_ms),
            "cdid": client_descriptor_id,
            "ts": str(int(now)),
            "device_id": device_id,
            "openudid": install_id,
        }
        return ClientIdentity(
            device_id=device_id,
            client_descriptor_id=client_descriptor_id,
            install_id=install_id,
            timestamp=int(now),
            timestamp_ms=now_ms,
            query_parameters=params,
        )

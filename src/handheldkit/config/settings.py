"""Configuration management for handheldkit.

Loads settings from a YAML configuration file with environment variable
overrides. Every constant the provisioning scripts depend on (addresses,
device paths, USB identifiers, retry budgets) lives here so it can be
changed per device without touching code.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from handheldkit.domain.models import KeyValue

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/handheldkit.yaml")
ENV_PREFIX = "HANDHELDKIT_"


class ConsoleEntry(BaseModel):
    display: str = Field(description="Name shown in the selection menu")
    real: str = Field(description="Directory name under consoles/")
    logo: str = Field(default="", description="Logo directory under consoles/, empty for none")


def _default_consoles() -> list[ConsoleEntry]:
    return [
        ConsoleEntry(display="XiFan Mymini", real="mymini", logo="logo/480P/"),
        ConsoleEntry(display="XiFan R36Max", real="r36max", logo="logo/720P/"),
        ConsoleEntry(display="XiFan R36Pro", real="r36pro", logo="logo/480P/"),
        ConsoleEntry(display="XiFan XF35H", real="xf35h", logo="logo/480P/"),
        ConsoleEntry(display="XiFan XF40H", real="xf40h", logo="logo/720P/"),
        ConsoleEntry(display="XiFan XF40V", real="dc40v", logo="logo/720P/"),
        ConsoleEntry(display="XiFan DC40V", real="dc40v", logo="logo/720P/"),
        ConsoleEntry(display="XiFan DC35V", real="dc35v", logo="logo/480P/"),
    ]


class DtbConfig(BaseModel):
    title: str = Field(default="XIFAN")
    consoles_dir: str = Field(default="consoles")
    target_dir: str = Field(default=".")
    marker_file: str | None = Field(default=".cn", description="Language flag file, None to skip")
    consoles: list[ConsoleEntry] = Field(default_factory=_default_consoles)


class OtgConfig(BaseModel):
    gadget_dir: str = Field(default="/sys/kernel/config/usb_gadget/arkos_ssh")
    udc_class_dir: str = Field(default="/sys/class/udc")
    default_udc: str = Field(default="ff300000.usb")
    kernel_modules: list[str] = Field(
        default_factory=lambda: ["libcomposite", "usb_f_rndis", "usb_f_ecm"],
    )
    interface: str = Field(default="usb0")
    net_class_dir: str = Field(default="/sys/class/net", description="Where the kernel lists network interfaces")
    id_vendor: str = Field(default="0x1d6b")
    id_product: str = Field(default="0x0104")
    serial_prefix: str = Field(default="ArkOS")
    manufacturer: str = Field(default="ArkOS Team")
    product: str = Field(default="Gaming Console")
    configuration: str = Field(default="SSH over OTG for ArkOS")
    max_power: int = Field(default=500, gt=0)

    device_ip: str = Field(default="192.168.7.1")
    netmask: str = Field(default="255.255.255.0")
    prefix_length: int = Field(default=24, ge=0, le=32)
    dhcp_start: str = Field(default="192.168.7.100")
    dhcp_end: str = Field(default="192.168.7.200")
    dhcp_lease: str = Field(default="12h")
    dhcp_config_path: str = Field(default="/tmp/usb_dhcp.conf")

    settle_delay: float = Field(default=3.0, ge=0)
    link_retries: int = Field(default=10, gt=0)
    link_retry_interval: float = Field(default=2.0, ge=0)
    ssh_settle_delay: float = Field(default=2.0, ge=0)
    sshd_path: str = Field(default="/usr/sbin/sshd")
    ssh_user: str = Field(default="ark")
    ssh_password: str = Field(default="ark")

    tty: str = Field(default="/dev/tty1")
    console_font: str = Field(default="/usr/share/consolefonts/Lat7-Terminus16.psf.gz")
    gptokeyb_path: str = Field(default="/opt/inttools/gptokeyb")
    gptokeyb_keys: str = Field(default="/opt/inttools/keys.gptk")
    gamecontroller_db: str = Field(default="/opt/inttools/gamecontrollerdb.txt")
    uinput_device: str = Field(default="/dev/uinput")
    session_name: str = Field(default="handheldkit-otg")


class KeyBinding(BaseModel):
    key: str = Field(description="evdev key name, e.g. BTN_START")
    value: KeyValue = Field(description="0 release, 1 press, 2 repeat")
    action: str = Field(description="Argument passed to the helper command")


def _default_bindings() -> list[KeyBinding]:
    return [
        KeyBinding(key="BTN_BACK", value=KeyValue.PRESS, action="startselect"),
        KeyBinding(key="BTN_SELECT", value=KeyValue.PRESS, action="select_press"),
        KeyBinding(key="BTN_SELECT", value=KeyValue.RELEASE, action="select_release"),
        KeyBinding(key="BTN_START", value=KeyValue.PRESS, action="start_press"),
        KeyBinding(key="BTN_START", value=KeyValue.RELEASE, action="start_release"),
    ]


class AdcKeysConfig(BaseModel):
    model_path: str = Field(default="/sys/firmware/devicetree/base/model")
    model_pattern: str = Field(default="D007 Plus")
    device: str = Field(default="/dev/input/by-path/platform-d007-keys-event-joystick")
    helper_command: list[str] = Field(
        default_factory=lambda: ["/usr/bin/python3", "/usr/local/bin/adckeys.py"],
    )
    restart_delay: float = Field(default=1.0, ge=0)
    bindings: list[KeyBinding] = Field(default_factory=_default_bindings)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    console: bool = Field(default=True, description="Log to stderr")
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for handheldkit.

    Loads from YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": ENV_PREFIX,
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    dtb: DtbConfig = Field(default_factory=DtbConfig)
    otg: OtgConfig = Field(default_factory=OtgConfig)
    adc_keys: AdcKeysConfig = Field(default_factory=AdcKeysConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # YAML values arrive as init kwargs; environment must still win.
        return env_settings, dotenv_settings, init_settings, file_secret_settings


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Priority: env vars > .env file > YAML file > defaults
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    yaml_data = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        logger.warning("Config file %s not found, using defaults + env vars", path)

    return Settings(**yaml_data)

from .step_20_install_guacamole import InstallGuacamoleStep
from .step_50_schedule_backup import ScheduleBackupStep
from .step_60_install_nginx import InstallNginxStep
from .step_70_tls_self_signed import SelfSignedTlsStep
from .step_75_tls_letsencrypt import LetsEncryptTlsStep
from .step_90_finalize import FinalizeStep

__all__ = [
    "InstallGuacamoleStep",
    "ScheduleBackupStep",
    "InstallNginxStep",
    "SelfSignedTlsStep",
    "LetsEncryptTlsStep",
    "FinalizeStep",
]

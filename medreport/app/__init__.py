"""App modules for medreport."""

from medreport.app import config
from medreport.app import models
from medreport.app import routers
from medreport.app import services

__all__ = [
    "config",
    "models",
    "routers",
    "services",
]

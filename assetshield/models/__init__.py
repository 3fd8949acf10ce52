# -*- coding: utf-8 -*-
from assetshield.infra.db import db

from .customer import Customer
from .white_label import CustomerDomain, WhiteLabelConfig
from .lead import ClientLead
from .activity_log import ActivityLog
from .office import DocumentTemplate, Office
from .provisioning_run import ProvisioningRun

__all__ = [
    "db",
    "Customer",
    "WhiteLabelConfig",
    "CustomerDomain",
    "ClientLead",
    "ActivityLog",
    "Office",
    "DocumentTemplate",
    "ProvisioningRun",
]

"""Orchestrator package - coordinates provisioning and upload workflows."""
from .batch import UploadOrchestrator, classify
from .core import ProvisioningService

__all__ = ["ProvisioningService", "UploadOrchestrator", "classify"]

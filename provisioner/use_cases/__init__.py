"""Application use cases for provisioning workflows."""

from .folders import CheckFolderUseCase, CreateFolderStructureUseCase, ResolveDayFolderUseCase
from .order_status import SWStatusResult, UploadOrderStatusUseCase, VersaceStatusResult
from .payroll import PayrollUploadResult, UploadPayrollUseCase
from .uploads import (
    PrototypeUploadResult,
    UploadAlertImageUseCase,
    UploadDayFolderBatchUseCase,
    UploadDocumentUseCase,
    UploadPrototypeWorkbookUseCase,
    intrastat_key,
)

__all__ = [
    "CheckFolderUseCase",
    "CreateFolderStructureUseCase",
    "ResolveDayFolderUseCase",
    "UploadOrderStatusUseCase",
    "SWStatusResult",
    "VersaceStatusResult",
    "UploadPayrollUseCase",
    "PayrollUploadResult",
    "UploadAlertImageUseCase",
    "UploadDayFolderBatchUseCase",
    "UploadDocumentUseCase",
    "UploadPrototypeWorkbookUseCase",
    "PrototypeUploadResult",
    "intrastat_key",
]

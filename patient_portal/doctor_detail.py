"""Doctor detail loading for the booking screen."""
from typing import Optional

from patient_portal import config
from patient_portal.loaders import UiStateLoader
from patient_portal.logging_config import get_logger
from patient_portal.models import DoctorDetail
from patient_portal.state import UiState

logger = get_logger(__name__)


class DoctorDetailLoader(UiStateLoader):
    """
    Fetch one doctor's profile and availability.

    No retry policy: a failure is reported as UiError and the caller
    decides whether to call load() again. A successful load replaces the
    previous detail wholesale.
    """

    failure_message = config.DOCTOR_LOAD_FAILED_MESSAGE

    def __init__(self, repository, doctor_id: str):
        super().__init__()
        self.repository = repository
        self.doctor_id = doctor_id

    @property
    def detail(self) -> Optional[DoctorDetail]:
        return self.data

    async def fetch(self) -> DoctorDetail:
        logger.info("doctor_detail_load", doctor_id=self.doctor_id)
        return await self.repository.get_doctor_detail(self.doctor_id)

    async def load(self, doctor_id: Optional[str] = None) -> UiState:
        """
        Load the detail, optionally switching to another doctor first.

        Args:
            doctor_id: Doctor to load instead of the current one
        """
        if doctor_id is not None:
            self.doctor_id = doctor_id
        return await super().load()

"""
Chart Session

Session-scoped holder of one patient's chart. Every mutation is a
read-modify-write of the whole document against the store; persistence is
an explicit step of apply().
"""

from datetime import datetime, timezone
import logging

from dental_voice_chart.chart.chart_types import PatientChart
from dental_voice_chart.chart.mutator import apply_analysis
from dental_voice_chart.chart.store import ChartStore
from dental_voice_chart.errors import ChartPersistenceError
from dental_voice_chart.extraction.chart_types import AnalysisResult

logger = logging.getLogger(__name__)


class ChartSession:
    """Current chart of one patient, bound to a store."""

    def __init__(self, patient_id: str, store: ChartStore):
        self.patient_id = patient_id
        self.store = store
        self._chart: PatientChart | None = None

    @property
    def chart(self) -> PatientChart:
        """Last chart read from or written to the store."""
        if self._chart is None:
            self._chart = self._read()
        return self._chart

    @property
    def current(self) -> PatientChart | None:
        """Chart held by the session, without touching the store."""
        return self._chart

    def refresh(self) -> PatientChart:
        """Re-read the chart from the store."""
        self._chart = self._read()
        return self._chart

    def _read(self) -> PatientChart:
        try:
            document = self.store.load(self.patient_id)
        except ChartPersistenceError:
            raise
        except Exception as e:
            raise ChartPersistenceError(f"Chart read failed: {e}") from e

        if document is None:
            return PatientChart(patient_id=self.patient_id)
        return PatientChart.from_dict(document)

    def _write(self, chart: PatientChart) -> None:
        try:
            self.store.save(self.patient_id, chart.to_dict())
        except ChartPersistenceError:
            raise
        except Exception as e:
            raise ChartPersistenceError(f"Chart write failed: {e}") from e

    def apply(self, result: AnalysisResult) -> PatientChart:
        """Apply an analysis result and persist the updated chart.

        Either every operation is applied and saved, or the session keeps
        the chart it had before the call.

        Raises:
            ChartMutationError: the result could not be applied.
            ChartPersistenceError: the store rejected the read or write.
        """
        current = self._read()
        self._chart = current

        updated = apply_analysis(current, result)
        updated.updated_at = datetime.now(timezone.utc).isoformat()

        self._write(updated)
        self._chart = updated

        logger.info(
            "[Chart] Saved chart for patient %s (%d teeth)",
            self.patient_id,
            len(updated.teeth),
        )
        return updated

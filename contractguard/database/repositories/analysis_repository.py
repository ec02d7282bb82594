from typing import Any

import psycopg
from psycopg.rows import dict_row

from contractguard.analysis.exceptions import DocumentNotFoundError, PersistenceError
from contractguard.analysis.models import (
    AnalysisResult,
    AnalysisState,
    AnalysisStatus,
    Finding,
    Severity,
)
from contractguard.database.connection import get_connection
from contractguard.database.models import ContractRecord, RiskFindingRecord
from contractguard.database.repositories.base import (
    STALE_ATTEMPT_REASON,
    BaseAnalysisRepository,
    conflict_for,
)


class AnalysisRepository(BaseAnalysisRepository):
    """Database operations for the contracts and risk_findings tables."""

    def claim_for_analysis(self, document_id: int, *, reanalyze: bool = False) -> None:
        blocked = [AnalysisState.IN_PROGRESS.value]
        if not reanalyze:
            blocked.append(AnalysisState.COMPLETED.value)

        current: tuple[Any, ...] | None = None
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE contracts
                    SET analysis_status = 'in_progress', analysis_error = NULL,
                        analysis_started_at = NOW(), updated_at = NOW()
                    WHERE id = %s
                      AND analysis_status <> ALL(%s)
                    RETURNING id
                    """,
                    (document_id, blocked),
                )
                claimed = cur.fetchone()
                if claimed is None:
                    cur.execute(
                        "SELECT analysis_status FROM contracts WHERE id = %s",
                        (document_id,),
                    )
                    current = cur.fetchone()
            conn.commit()

        if claimed is not None:
            return
        if current is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        raise conflict_for(document_id, AnalysisState(current[0]))

    def claim_next_pending(self) -> ContractRecord | None:
        """Claim the next pending document using SELECT FOR UPDATE SKIP LOCKED."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, extracted_text, created_at
                    FROM contracts
                    WHERE analysis_status = 'pending'
                      AND extracted_text IS NOT NULL
                    ORDER BY created_at
                    LIMIT 1
                    FOR UPDATE SKIP LOCKED
                    """
                )
                row = cur.fetchone()

            if row is None:
                conn.commit()
                return None

            conn.execute(
                """
                UPDATE contracts
                SET analysis_status = 'in_progress', analysis_error = NULL,
                    analysis_started_at = NOW(), updated_at = NOW()
                WHERE id = %s
                """,
                (row["id"],),
            )
            conn.commit()

        return ContractRecord(
            id=row["id"],
            analysis_status=AnalysisState.IN_PROGRESS.value,
            extracted_text=row["extracted_text"],
            created_at=row["created_at"],
        )

    def replace_analysis_result(self, result: AnalysisResult) -> None:
        records = [
            _to_record(result.document_id, position, finding)
            for position, finding in enumerate(result.findings)
        ]
        with get_connection() as conn:
            try:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        UPDATE contracts
                        SET risk_score = %s, analysis_status = 'completed',
                            analysis_error = NULL, analysis_degraded = %s,
                            analysis_completed_at = NOW(), updated_at = NOW()
                        WHERE id = %s
                          AND analysis_status = 'in_progress'
                        """,
                        (result.overall_severity.value, result.degraded, result.document_id),
                    )
                    if cur.rowcount == 0:
                        conn.rollback()
                        raise PersistenceError(
                            f"Document {result.document_id} is no longer being analyzed"
                        )
                    cur.execute(
                        "DELETE FROM risk_findings WHERE contract_id = %s",
                        (result.document_id,),
                    )
                    if records:
                        cur.executemany(
                            """
                            INSERT INTO risk_findings
                            (contract_id, position, risk_type, risk_level,
                             problematic_text, explanation, source)
                            VALUES (%s, %s, %s, %s, %s, %s, %s)
                            """,
                            [
                                (
                                    r.contract_id,
                                    r.position,
                                    r.risk_type,
                                    r.risk_level,
                                    r.problematic_text,
                                    r.explanation,
                                    r.source,
                                )
                                for r in records
                            ],
                        )
                conn.commit()
            except psycopg.Error as exc:
                conn.rollback()
                raise PersistenceError(
                    f"Failed to store analysis result for document {result.document_id}"
                ) from exc

    def mark_failed(self, document_id: int, reason: str) -> None:
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE contracts
                SET analysis_status = 'failed', analysis_error = %s, updated_at = NOW()
                WHERE id = %s
                  AND analysis_status = 'in_progress'
                """,
                (reason, document_id),
            )
            conn.commit()

    def get_state(self, document_id: int) -> AnalysisState:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT analysis_status FROM contracts WHERE id = %s",
                    (document_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return AnalysisState(row[0])

    def set_state(self, document_id: int, state: AnalysisState) -> None:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE contracts
                    SET analysis_status = %s, updated_at = NOW()
                    WHERE id = %s
                    """,
                    (state.value, document_id),
                )
                if cur.rowcount == 0:
                    raise DocumentNotFoundError(f"Document {document_id} not found")
            conn.commit()

    def get_status(self, document_id: int) -> AnalysisStatus:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT c.analysis_status, c.risk_score, c.analysis_error,
                           c.analysis_degraded, c.analysis_started_at,
                           c.analysis_completed_at,
                           (SELECT COUNT(*) FROM risk_findings f
                            WHERE f.contract_id = c.id) AS findings_count
                    FROM contracts c
                    WHERE c.id = %s
                    """,
                    (document_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")

        state = AnalysisState(row["analysis_status"])
        return AnalysisStatus(
            document_id=document_id,
            state=state,
            overall_severity=Severity(row["risk_score"]) if row["risk_score"] else None,
            findings_count=row["findings_count"],
            error_message=row["analysis_error"] if state == AnalysisState.FAILED else None,
            started_at=row["analysis_started_at"],
            completed_at=row["analysis_completed_at"],
            degraded=bool(row["analysis_degraded"]),
        )

    def get_result(self, document_id: int) -> AnalysisResult | None:
        """Read the last completed result in a single statement so it is one snapshot."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT c.risk_score, c.analysis_degraded, c.analysis_completed_at,
                           f.risk_type, f.risk_level, f.problematic_text,
                           f.explanation, f.source
                    FROM contracts c
                    LEFT JOIN risk_findings f ON f.contract_id = c.id
                    WHERE c.id = %s
                    ORDER BY f.position
                    """,
                    (document_id,),
                )
                rows = cur.fetchall()

        if not rows:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        head = rows[0]
        if head["analysis_completed_at"] is None or head["risk_score"] is None:
            return None

        findings = tuple(
            Finding(
                category=row["risk_type"],
                severity=Severity(row["risk_level"]),
                matched_text=row["problematic_text"],
                explanation=row["explanation"],
                source=row["source"],
            )
            for row in rows
            if row["risk_type"] is not None
        )
        return AnalysisResult(
            document_id=document_id,
            overall_severity=Severity(head["risk_score"]),
            findings=findings,
            completed=True,
            degraded=bool(head["analysis_degraded"]),
            completed_at=head["analysis_completed_at"],
        )

    def fail_stale(self, max_age_seconds: int) -> list[int]:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE contracts
                    SET analysis_status = 'failed', analysis_error = %s, updated_at = NOW()
                    WHERE analysis_status = 'in_progress'
                      AND (analysis_started_at IS NULL
                           OR analysis_started_at <= NOW() - %s * INTERVAL '1 second')
                    RETURNING id
                    """,
                    (STALE_ATTEMPT_REASON, max_age_seconds),
                )
                rows = cur.fetchall()
            conn.commit()
        return [row[0] for row in rows]

    def add_document(self, extracted_text: str | None) -> int:
        """Insert a PENDING contract row and return its ID."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO contracts (extracted_text, analysis_status)
                    VALUES (%s, 'pending')
                    RETURNING id
                    """,
                    (extracted_text,),
                )
                row = cur.fetchone()
            conn.commit()
        if row is None:
            raise PersistenceError("Failed to insert contract")
        return int(row[0])


def _to_record(document_id: int, position: int, finding: Finding) -> RiskFindingRecord:
    return RiskFindingRecord(
        contract_id=document_id,
        position=position,
        risk_type=finding.category,
        risk_level=finding.severity.value,
        problematic_text=finding.matched_text,
        explanation=finding.explanation,
        source=finding.source,
    )

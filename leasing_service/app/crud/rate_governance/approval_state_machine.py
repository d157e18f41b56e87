"""Two-stage approval workflow shared by rate change requests and rate overrides.

    pending_recommendation --approve--> pending_final --approve--> approved
             |                               |
             +-----------reject--------------+-----reject-----> rejected

Every transition is a conditional UPDATE on (id, status, version), so of two
approvers racing on the same stage exactly one write lands and the other gets
``InvalidStateError``.
"""
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from leasing_service.app.enum.rate_governance_enum import (
    PENDING_STATUS_FOR_STAGE,
    ApprovalOutcome,
    ApprovalStage,
    RateApprovalStatus,
    RateRequestKind,
)
from leasing_service.app.models.rate_governance.rate_approval_decisions import RateApprovalDecision
from leasing_service.app.schemas.rate_governance.rate_approvals_schemas import PendingApprovalOut
from shared.core.auth import get_user
from shared.core.config import settings
from shared.core.exceptions import (
    AppException,
    InvalidStateError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from shared.models.users import Users
from shared.utils.identifiers import as_uuid

logger = logging.getLogger(__name__)


class ApprovalSubject(ABC):
    """Adapter that lets the state machine drive one request type."""

    kind: RateRequestKind
    model = None
    label: str = "request"

    def get(self, db: Session, request_id):
        record = (
            db.query(self.model)
            .populate_existing()
            .filter(self.model.id == as_uuid(request_id))
            .first()
        )
        if not record:
            raise NotFoundError(f"{self.label.capitalize()} not found")
        return record

    def pending(self, db: Session, status: RateApprovalStatus, exclude_requester=None) -> List:
        q = db.query(self.model).filter(self.model.status == status)
        if exclude_requester is not None:
            q = q.filter(self.model.requested_by != exclude_requester)
        return q.order_by(self.model.created_at.asc()).all()

    def before_final_approval(self, db: Session, record) -> None:
        """Runs inside the transition's transaction before the status is written."""

    def after_final_approval(self, db: Session, record, decided_by: UUID, decided_at: datetime) -> None:
        """Runs inside the transition's transaction after the status is written."""

    @abstractmethod
    def describe(self, record) -> PendingApprovalOut:
        ...


def has_capability(user: Optional[Users], stage: ApprovalStage) -> bool:
    if user is None or (user.status or "").lower() != "active":
        return False
    if stage == ApprovalStage.recommending:
        return bool(user.is_recommending_approver)
    return bool(user.is_final_approver)


def _transition_values(stage: ApprovalStage, outcome: ApprovalOutcome, user_id: UUID,
                       decided_at: datetime, comment: Optional[str]) -> Dict:
    if outcome == ApprovalOutcome.rejected:
        return {
            "status": RateApprovalStatus.rejected,
            "rejected_by": user_id,
            "rejected_at": decided_at,
            "rejected_reason": comment,
            "rejected_at_stage": stage,
        }
    if stage == ApprovalStage.recommending:
        return {
            "status": RateApprovalStatus.pending_final,
            "recommended_by": user_id,
            "recommended_at": decided_at,
            "recommended_remarks": comment,
        }
    return {
        "status": RateApprovalStatus.approved,
        "approved_by": user_id,
        "approved_at": decided_at,
        "approval_remarks": comment,
    }


class ApprovalStateMachine:

    def __init__(self, subjects: Iterable[ApprovalSubject]):
        self.subjects = {subject.kind: subject for subject in subjects}

    def subject_for(self, kind) -> ApprovalSubject:
        try:
            return self.subjects[RateRequestKind(kind)]
        except (KeyError, ValueError):
            raise ValidationError(f"Unknown request kind '{kind}'", field="kind")

    # ----------------------------------------------------
    # Queues
    # ----------------------------------------------------
    def list_pending(self, db: Session, user_id, stage, kind=None) -> List[PendingApprovalOut]:
        """Pending items the user may act on. Users without the capability get []."""
        try:
            stage = ApprovalStage(stage)
        except ValueError:
            raise ValidationError(f"Unknown approval stage '{stage}'", field="stage")

        user = get_user(db, user_id)
        if not has_capability(user, stage):
            return []

        subjects = [self.subject_for(kind)] if kind else list(self.subjects.values())
        exclude = None if settings.RATE_ALLOW_SELF_APPROVAL else user.id
        status = PENDING_STATUS_FOR_STAGE[stage]

        items = [
            subject.describe(record)
            for subject in subjects
            for record in subject.pending(db, status, exclude_requester=exclude)
        ]
        items.sort(key=lambda item: (item.created_at is None, item.created_at))
        return items

    # ----------------------------------------------------
    # Transitions
    # ----------------------------------------------------
    def recommend(self, db: Session, kind, request_id, user_id, outcome, comment: Optional[str] = None):
        return self._decide(db, ApprovalStage.recommending, kind, request_id, user_id, outcome, comment)

    def finalize(self, db: Session, kind, request_id, user_id, outcome, comment: Optional[str] = None):
        return self._decide(db, ApprovalStage.final, kind, request_id, user_id, outcome, comment)

    def _decide(self, db: Session, stage: ApprovalStage, kind, request_id, user_id, outcome, comment):
        subject = self.subject_for(kind)
        try:
            outcome = ApprovalOutcome(outcome)
        except ValueError:
            raise ValidationError(f"Unknown outcome '{outcome}'", field="outcome")

        user = get_user(db, user_id)
        if not has_capability(user, stage):
            raise UnauthorizedError(
                f"User is not a {stage.value} approver")

        record = subject.get(db, request_id)
        expected = PENDING_STATUS_FOR_STAGE[stage]
        if record.status != expected:
            raise InvalidStateError(
                f"Cannot act at the {stage.value} stage on a {subject.label} with status {record.status.value}",
                current_status=record.status.value)

        if not settings.RATE_ALLOW_SELF_APPROVAL and record.requested_by == user.id:
            raise UnauthorizedError(f"Cannot decide on your own {subject.label}")

        comment = comment.strip() if comment and comment.strip() else None
        if outcome == ApprovalOutcome.rejected and settings.RATE_REJECTION_REQUIRES_COMMENT and not comment:
            raise ValidationError("A reason is required when rejecting", field="comment")

        decided_at = datetime.now(timezone.utc)
        approving_final = stage == ApprovalStage.final and outcome == ApprovalOutcome.approved
        try:
            if approving_final:
                subject.before_final_approval(db, record)

            self._conditional_update(
                db, subject, record, expected,
                _transition_values(stage, outcome, user.id, decided_at, comment))

            db.add(RateApprovalDecision(
                request_kind=subject.kind,
                request_id=record.id,
                stage=stage,
                outcome=outcome,
                decided_by=user.id,
                decided_at=decided_at,
                comment=comment,
            ))

            if approving_final:
                subject.after_final_approval(db, record, user.id, decided_at)

            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning("Duplicate %s decision on %s %s", stage.value, subject.label, record.id)
            raise InvalidStateError(
                f"The {stage.value} stage of this {subject.label} has already been decided")
        except AppException:
            db.rollback()
            raise
        except Exception:
            db.rollback()
            logger.exception("Failed to record %s decision on %s %s", stage.value, subject.label, record.id)
            raise

        db.refresh(record)
        logger.info("%s %s %s at %s stage by %s -> %s",
                    subject.label, record.id, outcome.value, stage.value, user.id, record.status.value)
        return record

    def _conditional_update(self, db: Session, subject: ApprovalSubject, record,
                            expected: RateApprovalStatus, values: Dict) -> None:
        model = subject.model
        updated = (
            db.query(model)
            .filter(
                model.id == record.id,
                model.status == expected,
                model.version == record.version,
            )
            .update({**values, "version": model.version + 1}, synchronize_session=False)
        )
        if updated != 1:
            raise InvalidStateError(
                f"This {subject.label} was changed by someone else; refresh and try again")

"""Hand a rendered prescription to a share target.

The share target stands in for the platform share sheet: it receives a title,
a message and the path of the artifact. `OutboxShareTarget` drops both into an
outbox directory for whatever picks them up (a mail client, a sync folder).
"""

import json
import logging
import shutil
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from rxpad.core.config import Settings, settings
from rxpad.core.errors import ShareError
from rxpad.schemas.prescription import PrescriptionForm
from rxpad.services.prescription_form import patient_name
from rxpad.utils.phone import whatsapp_number

logger = logging.getLogger(__name__)


class ShareTarget(Protocol):
    def share(self, title: str, message: str, artifact_path: str) -> None: ...


class OutboxShareTarget:
    def __init__(self, outbox_dir: str | Path) -> None:
        self.outbox_dir = Path(outbox_dir)

    def share(self, title: str, message: str, artifact_path: str) -> None:
        source = Path(artifact_path)
        if not source.is_file():
            raise ShareError(f"No prescription file at {artifact_path}")
        try:
            self.outbox_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, self.outbox_dir / source.name)
            manifest = {
                "title": title,
                "message": message,
                "artifact": source.name,
                "mime_type": "application/pdf",
                "shared_at": datetime.now(timezone.utc).isoformat(),
            }
            manifest_path = self.outbox_dir / f"{source.stem}.json"
            manifest_path.write_text(json.dumps(manifest, indent=2), encoding="utf-8")
        except OSError as exc:
            raise ShareError(f"Could not place {source.name} in the outbox: {exc}") from exc
        logger.info("Shared %s to outbox %s", source.name, self.outbox_dir)


@dataclass(frozen=True)
class ShareMessage:
    channel: str
    title: str
    message: str


def whatsapp_message(form: PrescriptionForm) -> ShareMessage:
    name = patient_name(form)
    title = f"Prescription for {name}"
    phone = whatsapp_number(form.patient.cell_number) if form.patient and not form.use_custom_patient else ""
    message = f"whatsapp://send?phone={phone}" if phone else title
    return ShareMessage(channel="whatsapp", title=title, message=message)


def email_message(form: PrescriptionForm, practice: Settings = settings) -> ShareMessage:
    name = patient_name(form)
    subject = f"Prescription for {name}"
    body = (
        f"Please find attached prescription for {name}, for any queries please contact us at "
        f"{practice.PRACTICE_FAX} and ask for {practice.PRACTICE_CONTACT_NAME}"
    )
    return ShareMessage(channel="email", title=subject, message=body)


def share_prescription(
    artifact_path: str | Path,
    form: PrescriptionForm,
    target: ShareTarget,
    channel: str = "whatsapp",
) -> ShareMessage:
    """Compose the channel's title and message and hand the artifact to `target`.

    Raises ShareError when there is nothing to share or the target refuses it.
    """
    if not artifact_path:
        raise ShareError("No prescription file generated")
    if channel == "whatsapp":
        msg = whatsapp_message(form)
    elif channel == "email":
        msg = email_message(form)
    else:
        raise ShareError(f"Unknown share channel: {channel}")
    try:
        target.share(msg.title, msg.message, str(artifact_path))
    except ShareError:
        logger.exception("%s share failed", channel)
        raise
    except Exception as exc:
        logger.exception("%s share failed", channel)
        raise ShareError(f"Failed to share prescription via {channel}") from exc
    return msg

from __future__ import annotations

import logging
import threading
from datetime import date
from typing import List
from urllib.parse import urlencode

from pydantic import ValidationError as PydanticValidationError

from surveyflow.core.errors import NotFoundError, ValidationError
from surveyflow.models.response import GeneratedLink, utc_now
from surveyflow.models.survey import new_id
from surveyflow.services.storage import LINKS_KEY, StoragePort
from surveyflow.services.template_store import SurveyTemplateStore

logger = logging.getLogger(__name__)


class LinkGenerator:
    """Create shareable survey links with a validity window.

    The window and status are informational: submissions are accepted whether
    or not they arrive through an active link.
    """

    def __init__(self, storage: StoragePort, templates: SurveyTemplateStore, *, base_url: str) -> None:
        if storage is None:
            raise ValueError("storage must be provided")
        if templates is None:
            raise ValueError("templates must be provided")

        self._storage = storage
        self._templates = templates
        self._base_url = base_url.rstrip("/")
        self._lock = threading.Lock()

    def generate(self, survey_id: str, valid_from: date, valid_to: date) -> GeneratedLink:
        survey = self._templates.get(survey_id)
        link_id = new_id()
        try:
            link = GeneratedLink(
                id=link_id,
                survey_id=survey.id,
                survey_title=survey.title,
                link=self.public_url(survey.id, session=link_id),
                valid_from=valid_from,
                valid_to=valid_to,
                created_at=utc_now(),
                status="active",
            )
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc, prefix="Invalid link") from exc

        with self._lock:
            links = self._load_all_unlocked()
            links.append(link)
            self._save_all_unlocked(links)

        logger.info("Generated link %s for survey %s (%s to %s)", link.id, survey.id, valid_from, valid_to)
        return link

    def list(self, survey_id: str | None = None) -> List[GeneratedLink]:
        with self._lock:
            links = self._load_all_unlocked()
        if survey_id is None:
            return links
        return [link for link in links if link.survey_id == survey_id]

    def deactivate(self, link_id: str) -> GeneratedLink:
        with self._lock:
            links = self._load_all_unlocked()
            for link in links:
                if link.id == link_id:
                    link.status = "inactive"
                    self._save_all_unlocked(links)
                    logger.info("Deactivated link %s", link_id)
                    return link
        raise NotFoundError(f"Link not found: {link_id}")

    def public_url(self, survey_id: str, *, session: str | None = None) -> str:
        """Return the public form address for a survey."""

        params = {"survey": survey_id}
        if session:
            params["session"] = session
        return f"{self._base_url}/?{urlencode(params)}"

    def _load_all_unlocked(self) -> List[GeneratedLink]:
        return [GeneratedLink.model_validate(raw) for raw in self._storage.get(LINKS_KEY) or []]

    def _save_all_unlocked(self, links: List[GeneratedLink]) -> None:
        self._storage.set(LINKS_KEY, [link.model_dump(mode="json") for link in links])


__all__ = ["LinkGenerator"]

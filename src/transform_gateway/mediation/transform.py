"""
Transform mediator: send every inbound chat request to one fixed upstream model.

One pass per inbound message:

    START -> EXTRACT_CONTENT -> (empty: NOOP)
          -> STRIP_MODEL -> CALL_REMOTE -> (unavailable: MARK_REJECT -> REJECTED)
                                        -> (no body: FAILED)
                                        -> (body: REWRITE_CONTEXT -> ROUTED)

Nothing is retried or resumed here and no state survives between passes.
A REJECTED pass still reports success; the reject sentinel is acted on by a
later mediator.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from ..config import Settings
from ..obs.metrics import MEDIATIONS
from ..relay.client import ClassificationClient
from .content import extract_user_content, force_model
from .context import MessageContext
from .routing import ModelEndpoint, apply_routed_response, mark_reject

logger = logging.getLogger(__name__)


class MediationOutcome(str, Enum):
    NOOP = "noop"
    ROUTED = "routed"
    REJECTED = "rejected"
    FAILED = "failed"

    @property
    def succeeded(self) -> bool:
        return self is not MediationOutcome.FAILED


class TransformMediator:
    """
    Gateway mediation step with an explicit lifecycle.

    The embedding process calls init() once, mediate() per message and
    destroy() on shutdown. A client passed in is used as-is and is not
    closed by destroy().
    """

    is_content_aware = True

    def __init__(self, settings: Settings, client: Optional[ClassificationClient] = None):
        self.settings = settings
        self.transform_configs: Optional[str] = None  # accepted but unused
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> ClassificationClient:
        if self._client is None:
            self.init()
        return self._client

    def init(self) -> None:
        if self._client is None:
            self._client = ClassificationClient.from_settings(self.settings)
            self._owns_client = True
        logger.debug("TransformMediator initialized.")

    def destroy(self) -> None:
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def mediate(self, context: MessageContext) -> bool:
        return self.process(context).succeeded

    def process(self, context: MessageContext) -> MediationOutcome:
        logger.debug("TransformMediator mediation started.")
        try:
            outcome = self._run(context)
        except Exception:
            logger.error("Error in TransformMediator mediation", exc_info=True)
            outcome = MediationOutcome.FAILED
        MEDIATIONS.labels(outcome=outcome.value).inc()
        return outcome

    def _run(self, context: MessageContext) -> MediationOutcome:
        extraction = extract_user_content(context)
        if extraction.empty:
            if extraction.error:
                logger.warning(f"Unable to extract user request content: {extraction.error}")
            else:
                logger.warning("Unable to extract user request content")
            return MediationOutcome.NOOP
        user_content = extraction.text

        force_model(context, self.settings.model)
        return self._route(context, user_content)

    def _route(self, context: MessageContext, user_content: str) -> MediationOutcome:
        logger.debug(f"Routing to upstream service with user content: {user_content[:100]}")

        client = self.client
        if not client.is_service_available():
            logger.warning("Upstream chat-completion service is not available")
            mark_reject(context)
            return MediationOutcome.REJECTED

        result = client.complete(user_content)
        if not result.ok:
            logger.warning(f"No response received from upstream service ({result.status.value}: {result.error})")
            return MediationOutcome.FAILED

        endpoint = ModelEndpoint(model=self.settings.model, endpoint_id=self.settings.endpoint_id)
        apply_routed_response(context, endpoint, result.body, user_content)
        return MediationOutcome.ROUTED

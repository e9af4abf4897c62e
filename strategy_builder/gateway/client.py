"""HTTP gateway to the external strategy validation service.

The gateway checks rules locally first and only calls out when both sides
are structurally sound. It never mutates the trees or chains it is given.

Failures are kept apart:
- StructuralError: rejected locally, no request was made
- TransportError: the service could not be reached or answered unusably
- a ValidationResult with ``valid=False``: the service judged the rule
  logically unsound
"""

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from config.settings import Settings, get_settings
from strategy_builder.errors import StructuralError, TransportError
from strategy_builder.gateway.models import SignalPoint, StrategyConditionsRequest, ValidationResult
from strategy_builder.indicators.catalog import IndicatorCatalog
from strategy_builder.logic.chain import Chain
from strategy_builder.logic.checks import chain_issues, tree_issues
from strategy_builder.logic.parse import parse
from strategy_builder.logic.tree import Node

logger = logging.getLogger(__name__)

# Default timeout for HTTP calls (seconds)
_DEFAULT_TIMEOUT = 15.0

_GENERIC_FAILURE = "Failed to validate strategy"


class ValidationGateway:
    """Client for the validation and test endpoints.

    Example:
        >>> async with ValidationGateway("http://localhost:3001/api") as gateway:
        ...     result = await gateway.validate(buy_tree, sell_tree)
    """

    def __init__(
        self,
        base_url: str,
        validate_path: str = "/custom-strategies/validate",
        test_path: str = "/custom-strategies/test",
        timeout: float = _DEFAULT_TIMEOUT,
        auth_token: str = "",
        catalog: Optional[IndicatorCatalog] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            base_url: Service base URL (e.g. "http://localhost:3001/api")
            validate_path: Path of the validation endpoint
            test_path: Path of the test endpoint
            timeout: HTTP request timeout in seconds
            auth_token: Bearer token, sent when non-empty
            catalog: If given, leaf conditions are checked locally
            client: HTTP client to use; one is created (and owned) if omitted
        """
        self.base_url = base_url.rstrip("/")
        self.validate_path = validate_path
        self.test_path = test_path
        self.timeout = timeout
        self.catalog = catalog
        self._auth_token = auth_token
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)
        logger.info("ValidationGateway initialized: base_url=%s", self.base_url)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        catalog: Optional[IndicatorCatalog] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> "ValidationGateway":
        cfg = (settings or get_settings()).validation
        return cls(
            base_url=cfg.base_url,
            validate_path=cfg.validate_path,
            test_path=cfg.test_path,
            timeout=cfg.timeout,
            auth_token=cfg.auth_token,
            catalog=catalog,
            client=client,
        )

    async def __aenter__(self) -> "ValidationGateway":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this gateway created it."""
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    async def validate(self, buy: Node, sell: Node) -> ValidationResult:
        """Validate a strategy's buy and sell trees.

        Args:
            buy: Buy-side logic tree
            sell: Sell-side logic tree

        Returns:
            The service's verdict (``valid`` may be False)

        Raises:
            StructuralError: If either tree fails local checks; no request is made
            TransportError: If the service call fails
        """
        self._check_trees(buy, sell)
        request = StrategyConditionsRequest.from_trees(buy, sell)
        response = await self._post(self.validate_path, request.model_dump())
        body = _json_body(response)

        result = ValidationResult.from_payload(body)
        if response.is_error:
            if result is not None:
                # Rejections with a verdict in the body are logical failures
                logger.info(
                    "Validation service rejected strategy",
                    extra={"status_code": response.status_code, "errors": result.errors},
                )
                return result
            logger.error(
                "Validation request failed: status=%d body=%s",
                response.status_code, body,
            )
            raise TransportError(_GENERIC_FAILURE, status_code=response.status_code)

        if result is None:
            logger.error("Unexpected validation response format: %s", body)
            raise TransportError(_GENERIC_FAILURE, status_code=response.status_code)

        logger.debug(
            "Validation result: valid=%s errors=%d warnings=%d",
            result.valid, len(result.errors), len(result.warnings),
        )
        return result

    async def validate_chains(self, buy: Chain, sell: Chain) -> ValidationResult:
        """Check both chains locally, parse them and validate the trees.

        Raises:
            StructuralError: If either chain is empty or has a dangling NOT
            TransportError: If the service call fails
        """
        issues = chain_issues(buy, "buy") + chain_issues(sell, "sell")
        if issues:
            logger.info("Chains rejected locally", extra={"issues": issues})
            raise StructuralError(issues)
        return await self.validate(parse(buy, self.catalog), parse(sell, self.catalog))

    # ------------------------------------------------------------------
    # Test run
    # ------------------------------------------------------------------

    async def test_strategy(self, buy: Node, sell: Node) -> list[SignalPoint]:
        """Run the strategy against the service's sample data.

        Returns:
            Ordered signals, one per timestamp

        Raises:
            StructuralError: If either tree fails local checks; no request is made
            TransportError: If the call fails or the response is malformed
        """
        self._check_trees(buy, sell)
        request = StrategyConditionsRequest.from_trees(buy, sell)
        response = await self._post(self.test_path, request.model_dump())
        body = _json_body(response)

        if response.is_error or not isinstance(body, dict):
            logger.error("Test request failed: status=%d body=%s", response.status_code, body)
            raise TransportError("Failed to test strategy", status_code=response.status_code)

        data = body.get("data") if isinstance(body.get("data"), dict) else body
        raw_signals = data.get("signals")
        if not isinstance(raw_signals, list):
            logger.error("Unexpected test response format: %s", body)
            raise TransportError("Failed to test strategy", status_code=response.status_code)

        try:
            signals = [SignalPoint.model_validate(s) for s in raw_signals]
        except PydanticValidationError as exc:
            logger.error("Malformed signal in test response: %s", exc)
            raise TransportError("Failed to test strategy", status_code=response.status_code) from exc

        logger.debug("Test run returned %d signals", len(signals))
        return signals

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _check_trees(self, buy: Node, sell: Node) -> None:
        issues = tree_issues(buy, self.catalog, "buy") + tree_issues(sell, self.catalog, "sell")
        if issues:
            logger.info("Trees rejected locally", extra={"issues": issues})
            raise StructuralError(issues)

    async def _post(self, path: str, json_body: dict) -> httpx.Response:
        """POST to the service, mapping network failures to TransportError."""
        url = f"{self.base_url}{path}"
        headers = {"Authorization": f"Bearer {self._auth_token}"} if self._auth_token else None
        logger.debug("POST %s", url)
        try:
            return await self._client.post(url, json=json_body, headers=headers, timeout=self.timeout)
        except httpx.TimeoutException as exc:
            logger.error("Validation service timed out: %s", url)
            raise TransportError("Validation service timed out") from exc
        except httpx.RequestError as exc:
            logger.error("Validation service unreachable: %s (%s)", url, exc)
            raise TransportError("Unable to reach the validation service") from exc


def _json_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None

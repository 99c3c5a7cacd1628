"""Main module entrypoint for local runtime execution.

This module validates startup configuration and launches the FastAPI service,
or runs one of the diagnostic commands against the configured registry.
"""

import argparse
import asyncio
import json

import uvicorn

from linkgate.adapters import AppRegistryGateway
from linkgate.api.routers.deeplink import api_serialize_candidates
from linkgate.bootstrap import bootstrap_create_application, bootstrap_create_registry_adapter
from linkgate.classification import SHARE_ROUTE_PREFIXES, RequestClassifier, indexing_build_policy
from linkgate.config import AppSettings, config_configure_logging, config_load_settings
from linkgate.deeplink import (
    AsyncioRaceScheduler,
    ClientEnvironment,
    DeepLinkResolver,
    DeepLinkUriBuilder,
    ManualVisibilitySource,
    RecordingNavigator,
    deeplink_build_candidates,
    deeplink_environment_from_headers,
)
from linkgate.domain import DeepLinkRequest, domain_build_deeplink_request


def main() -> None:
    """Run selected runtime command with validated startup configuration.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
    """

    argument_parser = argparse.ArgumentParser(description="Mini-app link gateway runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "deeplink", "classify", "simulate"),
        help="Runtime command: `api` starts server, `deeplink` prints candidates for an app, "
        "`classify` prints the crawler verdict for a request, `simulate` runs one navigation race",
        type=str,
    )
    argument_parser.add_argument("app_id", nargs="?", type=str, help="App id for `deeplink` and `simulate`")
    argument_parser.add_argument("--path", dest="path", type=str, help="In-app route or request path for `classify`")
    argument_parser.add_argument(
        "--param",
        dest="params",
        action="append",
        default=[],
        type=str,
        help="Ordered `key=value` query parameter, repeatable",
    )
    argument_parser.add_argument("--user-agent", dest="user_agent", default="", type=str, help="Client user agent")
    argument_parser.add_argument(
        "--hide-after-ms",
        dest="hide_after_ms",
        type=int,
        help="For `simulate`: hide the page after this delay, omit to let the timer win",
    )
    parsed_arguments = argument_parser.parse_args()

    settings = config_load_settings()
    config_configure_logging(settings)

    if parsed_arguments.command == "classify":
        main_print_json(main_classify(settings, parsed_arguments.path or "/", parsed_arguments.user_agent))
        return

    if parsed_arguments.command in ("deeplink", "simulate"):
        if not parsed_arguments.app_id:
            argument_parser.error(f"`{parsed_arguments.command}` requires an app_id")
        deeplink_request = domain_build_deeplink_request(
            app_id=parsed_arguments.app_id,
            path=parsed_arguments.path,
            params=main_parse_params(parsed_arguments.params),
        )
        environment = deeplink_environment_from_headers({"user-agent": parsed_arguments.user_agent})
        if parsed_arguments.command == "deeplink":
            main_print_json(main_deeplink(settings, deeplink_request, environment))
            return
        payload = asyncio.run(main_simulate(settings, deeplink_request, environment, parsed_arguments.hide_after_ms))
        main_print_json(payload)
        if payload["outcome"] in ("app-not-found", "registry-unavailable"):
            raise SystemExit(1)
        return

    application = bootstrap_create_application(settings=settings)
    uvicorn.run(
        application,
        host=settings.application_host,
        port=settings.application_port,
    )


def main_parse_params(raw_params: list[str]) -> list[tuple[str, str]]:
    """Parse repeated `key=value` arguments preserving order.

    Args:
        raw_params: Raw CLI values.

    Returns:
        list[tuple[str, str]]: Ordered pairs; a value without `=` maps to an empty string.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    parsed_params: list[tuple[str, str]] = []
    for raw_param in raw_params:
        key, _, value = raw_param.partition("=")
        if key.strip():
            parsed_params.append((key.strip(), value))
    return parsed_params


def main_classify(settings: AppSettings, path: str, user_agent: str) -> dict[str, object]:
    """Classify one request and resolve its robots directive.

    Args:
        settings: Validated runtime settings.
        path: Request path.
        user_agent: Request user agent.

    Returns:
        dict[str, object]: Verdict fields plus the robots directive.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    classifier = RequestClassifier(extra_user_agents=settings.extra_crawler_user_agents)
    indexing_policy = indexing_build_policy(
        share_prefixes=SHARE_ROUTE_PREFIXES,
        share_directive=settings.share_robots_directive,
        default_directive=settings.default_robots_directive,
    )
    verdict = classifier.classifier_classify(path, {"user-agent": user_agent})
    return {
        "path": path,
        "is_crawler": verdict.is_crawler,
        "crawler_family": verdict.crawler_family,
        "in_scope": verdict.in_scope,
        "robots": indexing_policy.indexing_resolve_directive(path),
    }


def main_deeplink(
    settings: AppSettings,
    deeplink_request: DeepLinkRequest,
    environment: ClientEnvironment,
) -> dict[str, object]:
    """Build candidates for one request after checking the registry.

    Args:
        settings: Validated runtime settings.
        deeplink_request: Parsed request.
        environment: Client environment.

    Returns:
        dict[str, object]: Candidate payload plus the app's approval state.

    Raises:
        RegistryUnavailableError: Raised when the registry cannot answer.
    """

    registry_adapter = bootstrap_create_registry_adapter(settings)
    try:
        gateway = AppRegistryGateway(registry=registry_adapter, base_url=settings.base_url)
        app = gateway.registry_get_app(deeplink_request.app_id)
    finally:
        registry_adapter.registry_close()

    candidates = deeplink_build_candidates(main_uri_builder(settings), deeplink_request, environment)
    payload = api_serialize_candidates(candidates)
    payload["app_id"] = deeplink_request.app_id
    payload["app_status"] = app.approval_status.value if app is not None else "not-found"
    return payload


async def main_simulate(
    settings: AppSettings,
    deeplink_request: DeepLinkRequest,
    environment: ClientEnvironment,
    hide_after_ms: int | None,
) -> dict[str, object]:
    """Run one navigation race on the event loop with a recording navigator.

    Args:
        settings: Validated runtime settings.
        deeplink_request: Parsed request.
        environment: Client environment.
        hide_after_ms: Delay before the page is hidden, None to never hide it.

    Returns:
        dict[str, object]: Outcome, platform and attempted URIs.

    Raises:
        RuntimeError: Raised when no event loop is running.
    """

    registry_adapter = bootstrap_create_registry_adapter(settings)
    navigator = RecordingNavigator()
    visibility = ManualVisibilitySource()
    loop = asyncio.get_running_loop()
    settled = loop.create_future()

    def main_on_settled(_race: object) -> None:
        if not settled.done():
            settled.set_result(None)

    try:
        resolver = DeepLinkResolver(
            gateway=AppRegistryGateway(registry=registry_adapter, base_url=settings.base_url),
            uri_builder=main_uri_builder(settings),
            navigator=navigator,
            scheduler=AsyncioRaceScheduler(loop),
            visibility=visibility,
            timeout_seconds=settings.deeplink_visibility_timeout_ms / 1000,
        )
        race = resolver.deeplink_resolve(
            deeplink_request,
            environment,
            listener=main_on_settled,
        )
        if hide_after_ms is not None and not race.is_settled:
            loop.call_later(hide_after_ms / 1000, visibility.visibility_emit, True)
        await settled
    finally:
        registry_adapter.registry_close()

    return {
        "app_id": deeplink_request.app_id,
        "platform": race.platform.value if race.platform is not None else None,
        "outcome": race.outcome.value if race.outcome is not None else None,
        "error": str(race.error) if race.error is not None else None,
        "attempted_uris": list(race.attempted_uris),
    }


def main_uri_builder(settings: AppSettings) -> DeepLinkUriBuilder:
    return DeepLinkUriBuilder(
        product_scheme=settings.product_scheme,
        host_domain=settings.host_domain,
        app_store_url=settings.app_store_url,
        play_store_url=settings.play_store_url,
        base_url=settings.base_url,
    )


def main_print_json(payload: dict[str, object]) -> None:
    print(json.dumps(payload, indent=2))


if __name__ == "__main__":
    main()

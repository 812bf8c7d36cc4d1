# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Subcommand handlers for the packwright CLI.

Each function here corresponds to one subcommand and returns an exit code.
Pipeline errors are caught here and only here: preconditions and detection
problems map to VALIDATION_ERROR, failing native tools and notarization to
RUNTIME_ERROR.

No print() calls. Everything goes through the structured logger.
"""

import argparse
import logging
import signal
import threading
from pathlib import Path
from typing import Optional

from packwright.cli.exit_codes import (
    CONFIG_ERROR,
    RUNTIME_ERROR,
    SUCCESS,
    USER_ERROR,
    VALIDATION_ERROR,
)
from packwright.config.exceptions import ConfigError
from packwright.config.loader import load_config
from packwright.config.schema import PackwrightConfig
from packwright.logging.logger import get_logger
from packwright.pipeline.exceptions import (
    DetectionError,
    NotarizationFailedError,
    PipelineError,
    PreconditionError,
)
from packwright.process.runner import CommandRunner
from packwright.runtime.bootstrap import RuntimeSession


def _load(
    args: argparse.Namespace,
    command_name: str,
) -> tuple[int, Optional[PackwrightConfig], logging.Logger]:
    """
    The shared setup every command needs: a logger and, if given, the config.

    Returns (exit_code, config, logger). If exit_code is not SUCCESS the
    caller returns it immediately.
    """
    logger = get_logger(f"packwright.cli.{command_name}", log_level=args.log_level or "INFO")

    config = None
    if args.config is not None:
        try:
            config = load_config(Path(args.config))
        except ConfigError as err:
            logger.error(
                "Configuration error",
                extra={"command": command_name, "error": str(err)},
            )
            return CONFIG_ERROR, None, logger

    return SUCCESS, config, logger


def _session(args: argparse.Namespace, config: Optional[PackwrightConfig]) -> RuntimeSession:
    return RuntimeSession(config.global_config if config else None, log_level=args.log_level)


def _runner(config: Optional[PackwrightConfig]) -> CommandRunner:
    return CommandRunner(timeout_seconds=config.process.timeout_seconds if config else None)


def _failure_code(err: PipelineError) -> int:
    if isinstance(err, (PreconditionError, DetectionError)):
        return VALIDATION_ERROR
    return RUNTIME_ERROR


def _log_pipeline_error(logger: logging.Logger, command_name: str, err: PipelineError) -> None:
    extra: dict[str, object] = {"command": command_name, "error": str(err), "kind": type(err).__name__}
    if isinstance(err, NotarizationFailedError):
        extra["submission_id"] = err.result.submission_id
        extra["status"] = err.result.status.value
        if err.result.log:
            extra["notary_log"] = err.result.log
    logger.error("Command failed", extra=extra)


def handle_package(args: argparse.Namespace) -> int:
    """Run the full packaging pipeline for this host."""
    exit_code, config, logger = _load(args, "package")
    if exit_code != SUCCESS:
        return exit_code

    if config is None or config.project is None:
        logger.error("The package command needs --config with a 'project' section")
        return USER_ERROR

    from packwright.pipeline.orchestrator import PipelineOrchestrator

    stop_event = threading.Event()
    previous_handler = signal.signal(signal.SIGTERM, lambda signum, frame: stop_event.set())

    try:
        with _session(args, config):
            orchestrator = PipelineOrchestrator(config, _runner(config), stop_event=stop_event)

            if args.dry_run:
                for command in orchestrator.plan():
                    logger.info("Dry run, would run", extra={"command_line": command})
                return SUCCESS

            report = orchestrator.run()
            logger.info(
                "Packaging complete",
                extra={"platform": report.platform, "steps": report.step_names},
            )
            return SUCCESS

    except PipelineError as err:
        _log_pipeline_error(logger, "package", err)
        return _failure_code(err)
    except Exception as err:
        logger.error("Packaging failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR
    finally:
        signal.signal(signal.SIGTERM, previous_handler)


def handle_sign(args: argparse.Namespace) -> int:
    """Sign an .app bundle: everything inside, the runtime, then the launcher."""
    exit_code, config, logger = _load(args, "sign")
    if exit_code != SUCCESS:
        return exit_code

    from packwright.config.schema import MacConfig
    from packwright.signing.signer import Signer, SigningIdentity

    mac = config.mac if config else MacConfig()
    identity = args.identity or mac.developer_id
    if not identity:
        logger.error("No signing identity: pass --identity or set mac.developer_id")
        return USER_ERROR

    try:
        with _session(args, config) as session:
            runtime_entitlements = args.entitlements_runtime or mac.entitlements_runtime
            launcher_entitlements = args.entitlements_launcher or mac.entitlements_launcher
            signing_identity = SigningIdentity(
                identity=identity,
                entitlements_runtime=Path(runtime_entitlements)
                if runtime_entitlements
                else session.entitlements.runtime,
                entitlements_launcher=Path(launcher_entitlements)
                if launcher_entitlements
                else session.entitlements.launcher,
            )
            signer = Signer(
                signing_identity,
                bundle_root=Path(args.app),
                launcher=Path(args.launcher),
                runner=_runner(config),
                runtime_path_in_bundle=mac.runtime_path_in_bundle,
                runtime_executables=mac.runtime_executables,
            )

            if args.dry_run:
                for command in (
                    signer.build_sign_all_command(),
                    signer.build_sign_runtime_executables_command(),
                    signer.build_sign_launcher_command(),
                ):
                    logger.info("Dry run, would run", extra={"command_line": command})
                return SUCCESS

            result = signer.sign()
            if not result.success:
                logger.error(
                    "Signing failed",
                    extra={"phase": result.step, "exit_code": result.exit_code, "stderr": result.stderr},
                )
                return RUNTIME_ERROR
            return SUCCESS

    except PipelineError as err:
        _log_pipeline_error(logger, "sign", err)
        return _failure_code(err)
    except Exception as err:
        logger.error("Signing failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_unsign(args: argparse.Namespace) -> int:
    """Remove signatures from the runtime embedded in an .app bundle."""
    exit_code, config, logger = _load(args, "unsign")
    if exit_code != SUCCESS:
        return exit_code

    from packwright.config.schema import MacConfig
    from packwright.signing.signer import build_remove_signature_command, remove_signatures

    mac = config.mac if config else MacConfig()
    runtime_root = Path(args.app) / mac.runtime_path_in_bundle

    try:
        with _session(args, config):
            if args.dry_run:
                logger.info(
                    "Dry run, would run",
                    extra={"command_line": build_remove_signature_command(runtime_root)},
                )
                return SUCCESS

            result = remove_signatures(runtime_root, _runner(config))
            if not result.success:
                logger.error(
                    "Removing signatures failed",
                    extra={"exit_code": result.exit_code, "stderr": result.stderr},
                )
                return RUNTIME_ERROR
            return SUCCESS

    except PipelineError as err:
        _log_pipeline_error(logger, "unsign", err)
        return _failure_code(err)
    except Exception as err:
        logger.error("Removing signatures failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_notarize(args: argparse.Namespace) -> int:
    """Notarize an already signed artifact and staple the ticket to it."""
    exit_code, config, logger = _load(args, "notarize")
    if exit_code != SUCCESS:
        return exit_code

    from packwright.config.schema import NotarizationConfig
    from packwright.notarization.notarizer import NotarizationRequest, Notarizer
    from packwright.notarization.stapler import NotarizationStapler

    profile = args.keychain_profile or (config.mac.keychain_profile if config else None)
    if not profile:
        logger.error("No credential profile: pass --keychain-profile or set mac.keychain_profile")
        return USER_ERROR

    settings = config.notarization if config else NotarizationConfig()
    artifact = Path(args.artifact)

    try:
        with _session(args, config):
            runner = _runner(config)
            notarizer = Notarizer(
                NotarizationRequest(artifact=artifact, keychain_profile=profile),
                runner,
                poll_interval_seconds=settings.poll_interval_seconds,
                max_poll_attempts=settings.max_poll_attempts,
            )

            if args.dry_run:
                logger.info("Dry run, would run", extra={"command_line": notarizer.build_submit_command()})
                return SUCCESS

            notarization = notarizer.notarize()
            if not notarization.success:
                raise NotarizationFailedError(notarization)

            result = NotarizationStapler(artifact, runner).apply(notarization)
            if not result.success:
                logger.error(
                    "Stapling failed",
                    extra={"exit_code": result.exit_code, "stderr": result.stderr},
                )
                return RUNTIME_ERROR

            logger.info(
                "Artifact notarized and stapled",
                extra={"artifact": str(artifact), "submission_id": notarization.submission_id},
            )
            return SUCCESS

    except PipelineError as err:
        _log_pipeline_error(logger, "notarize", err)
        return _failure_code(err)
    except Exception as err:
        logger.error("Notarization failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_info(args: argparse.Namespace) -> int:
    """Report the build host and which installer formats it can produce."""
    exit_code, config, logger = _load(args, "info")
    if exit_code != SUCCESS:
        return exit_code

    from packwright.packaging.detectors import detect_linux_format
    from packwright.runtime.environment import HostPlatform, detect_host_platform, get_system_info

    try:
        info = get_system_info()
        host = detect_host_platform()
        extra: dict[str, object] = {
            "host_platform": host.value,
            "python_version": info.python_version,
            "architecture": info.architecture,
        }
        if host is HostPlatform.LINUX:
            extra["linux_format"] = detect_linux_format(_runner(config)) or "none"
        if config is not None and config.project is not None:
            extra["project"] = config.project.name
            extra["version"] = config.project.version
        logger.info("Build host", extra=extra)
        return SUCCESS
    except Exception as err:
        logger.error("Info failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR

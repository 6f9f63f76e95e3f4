"""Command-line interface for the firewall mapper."""
from __future__ import annotations

import argparse
import csv
from dataclasses import replace
import json
import logging
from pathlib import Path
from typing import Any, Iterable, Optional

from .drift import DriftDetail, dns_policy_key, reconcile_dns_policies, reconcile_policies, summarize
from .logging_utils import configure_logging
from .mappers.dns import dns_policy_from_wire, dns_policy_to_wire
from .mappers.policy import firewall_policy_from_wire, firewall_policy_to_wire, resolve_site_id
from .parsers.config import ConfigData, dump_config_document, parse_config_file
from .parsers.excel import parse_excel
from .parsers.remote import RemoteData, dump_remote_document, parse_remote_file
from .utils import ParseError


DEFAULT_SITE_ID = "default"


def _select_local_source(config: str | None, excel: str | None, required: bool) -> None:
    """Ensure at most one (or, when required, exactly one) local source is selected."""
    provided = [value for value in (config, excel) if value]
    if len(provided) > 1 or (required and not provided):
        raise ParseError("Specify exactly one of --config or --excel")


def _load_local(config: str | None, excel: str | None) -> Optional[ConfigData]:
    if config:
        return parse_config_file(config)
    if excel:
        return parse_excel(excel)
    return None


def _for_site(data: ConfigData, site_id: str) -> ConfigData:
    """Keep only the entities that target the given site."""
    return ConfigData(
        firewall_policies=[
            policy for policy in data.firewall_policies if resolve_site_id(policy.site_id, site_id) == site_id
        ],
        dns_policies=[
            policy for policy in data.dns_policies if resolve_site_id(policy.site_id, site_id) == site_id
        ],
    )


def render(data: ConfigData, default_site_id: str) -> dict[str, Any]:
    """Map local entities to wire payloads grouped by target site."""
    sites: dict[str, RemoteData] = {}
    for policy in data.firewall_policies:
        site_id = resolve_site_id(policy.site_id, default_site_id)
        bucket = sites.setdefault(site_id, RemoteData(firewall_policies=[], dns_policies=[]))
        bucket.firewall_policies.append(firewall_policy_to_wire(policy))
    for dns_policy in data.dns_policies:
        site_id = resolve_site_id(dns_policy.site_id, default_site_id)
        bucket = sites.setdefault(site_id, RemoteData(firewall_policies=[], dns_policies=[]))
        bucket.dns_policies.append(dns_policy_to_wire(dns_policy))
    return {"sites": {site_id: dump_remote_document(bucket) for site_id, bucket in sorted(sites.items())}}


def read_back(remote: RemoteData, site_id: str, prior: Optional[ConfigData] = None) -> ConfigData:
    """Map a controller payload back to local models for one site."""
    priors = {}
    if prior is not None:
        priors = {dns_policy_key(policy.type, policy.domain): policy for policy in prior.dns_policies}
    dns_policies = []
    for wire in remote.dns_policies:
        policy = dns_policy_from_wire(wire, priors.get(dns_policy_key(wire.type, wire.domain)))
        dns_policies.append(policy if policy.site_id else replace(policy, site_id=site_id))
    return ConfigData(
        firewall_policies=[firewall_policy_from_wire(wire, site_id) for wire in remote.firewall_policies],
        dns_policies=dns_policies,
    )


def _write_json(output_path: Path, payload: dict[str, Any]) -> None:
    with output_path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, sort_keys=True)
        handle.write("\n")


def _write_drift(output_path: Path, details: Iterable[DriftDetail]) -> None:
    """Write drift details to CSV file."""
    with output_path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=["kind", "key", "status", "fields"])
        writer.writeheader()
        for detail in details:
            writer.writerow(
                {
                    "kind": detail.kind,
                    "key": detail.key,
                    "status": detail.status.value,
                    "fields": ";".join(detail.fields),
                }
            )


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint."""
    parser = argparse.ArgumentParser(description="UniFi firewall state mapper")
    parser.add_argument("--config", help="Local configuration JSON document")
    parser.add_argument("--excel", help="Local configuration workbook")
    parser.add_argument("--remote", help="Controller response JSON document for one site")
    parser.add_argument(
        "--mode",
        choices=["render", "read", "drift"],
        default="render",
        help="render: local to wire, read: wire to local, drift: compare both",
    )
    parser.add_argument("--site-id", default=DEFAULT_SITE_ID, help="Site for entities without an explicit site")
    parser.add_argument("--out", required=True, help="Output path")
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["debug", "info", "warning", "error", "fatal"],
        help="Logging verbosity (debug, info, warning, error, fatal)",
    )
    parser.add_argument(
        "--log-file",
        help="Optional log file path (defaults to console output)",
    )

    args = parser.parse_args(argv)

    configure_logging(args.log_level, args.log_file)
    logger = logging.getLogger(__name__)
    try:
        logger.info("Starting %s", args.mode)
        _select_local_source(args.config, args.excel, required=args.mode != "read")
        if args.mode != "render" and not args.remote:
            raise ParseError(f"--remote is required for --mode {args.mode}")

        local = _load_local(args.config, args.excel)
        if local is not None:
            logger.info(
                "Loaded %s firewall policies and %s DNS policies",
                len(local.firewall_policies),
                len(local.dns_policies),
            )
        remote = parse_remote_file(args.remote) if args.remote else None
        output_path = Path(args.out)

        if args.mode == "render":
            _write_json(output_path, render(local, args.site_id))
            logger.info("Wrote wire payloads to %s", output_path)
        elif args.mode == "read":
            _write_json(output_path, dump_config_document(read_back(remote, args.site_id, local)))
            logger.info("Wrote local state for site %s to %s", args.site_id, output_path)
        else:
            site_local = _for_site(local, args.site_id)
            details = reconcile_policies(site_local.firewall_policies, remote.firewall_policies)
            details.extend(reconcile_dns_policies(site_local.dns_policies, remote.dns_policies))
            _write_drift(output_path, details)
            counts = summarize(details)
            logger.info(
                "Wrote %s drift rows to %s (%s)",
                len(details),
                output_path,
                ", ".join(f"{status.value}={count}" for status, count in counts.items()),
            )
    except ParseError as exc:
        logger.warning("Parsing failed: %s", exc)
        raise SystemExit(str(exc)) from exc
    except Exception:
        logger.fatal("Fatal error during processing", exc_info=True)
        raise


if __name__ == "__main__":
    main()

"""
iamrecycler CLI — entry point for all operations.

Usage:
    iamrecycler run          # Start the operator (all namespaces by default)
    iamrecycler crd          # Print the IAMRecycler CustomResourceDefinition
    iamrecycler rotate ...   # Rotate one IAM user's keys into a Secret right now
    iamrecycler version      # Show version
"""

from __future__ import annotations

import argparse
import sys


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="iamrecycler",
        description="Rotate IAM access keys on a schedule and publish them into Kubernetes Secrets.",
    )
    parser.add_argument("--version", action="store_true", help="Show version and exit")

    subparsers = parser.add_subparsers(dest="command")

    # run
    run_parser = subparsers.add_parser("run", help="Start the operator")
    run_parser.add_argument(
        "--namespace", "-n", action="append", default=[], help="Namespace to watch (repeatable)"
    )
    run_parser.add_argument(
        "--all-namespaces",
        action="store_true",
        help="Watch every namespace, ignoring IAMRECYCLER_WATCH_NAMESPACE",
    )
    run_parser.add_argument(
        "--liveness", default=None, help="Liveness endpoint, e.g. http://0.0.0.0:8080/healthz"
    )
    run_parser.add_argument(
        "--standalone", action="store_true", help="Do not coordinate with other operator instances"
    )

    # crd
    subparsers.add_parser("crd", help="Print the IAMRecycler CRD as YAML")

    # rotate
    rotate_parser = subparsers.add_parser("rotate", help="Rotate keys once, ignoring the schedule")
    rotate_parser.add_argument("--secret", required=True, help="Target Secret name")
    rotate_parser.add_argument("--namespace", default="default", help="Secret namespace")
    rotate_parser.add_argument("--access-key-field", required=True, help="Secret key for the access key id")
    rotate_parser.add_argument("--secret-key-field", required=True, help="Secret key for the secret key")
    rotate_parser.add_argument("--iam-user", required=True, help="IAM user to rotate")

    # version
    subparsers.add_parser("version", help="Show version")

    args = parser.parse_args(argv)

    if args.version or args.command == "version":
        from iamrecycler import __version__

        print(f"iamrecycler {__version__}")
        return 0

    if args.command == "run":
        return _cmd_run(args)
    elif args.command == "crd":
        return _cmd_crd()
    elif args.command == "rotate":
        return _cmd_rotate(args)
    else:
        parser.print_help()
        return 0


def _configure_logging() -> None:
    from iamrecycler.config import get_config
    from iamrecycler.operator import configure_logging

    configure_logging(get_config())


def _cmd_run(args: argparse.Namespace) -> int:
    import kopf

    import iamrecycler.operator  # noqa: F401  registers the handlers
    from iamrecycler.config import get_config

    _configure_logging()

    namespaces = [] if args.all_namespaces else list(args.namespace)
    watch_ns = get_config().kube.namespace
    if not namespaces and watch_ns and not args.all_namespaces:
        namespaces = [ns.strip() for ns in watch_ns.split(",") if ns.strip()]

    kopf.run(
        clusterwide=not namespaces,
        namespaces=namespaces,
        liveness_endpoint=args.liveness,
        standalone=args.standalone,
    )
    return 0


def _cmd_crd() -> int:
    import yaml

    from iamrecycler.k8s.resource import build_crd_manifest

    print(yaml.safe_dump(build_crd_manifest(), sort_keys=False), end="")
    return 0


def _cmd_rotate(args: argparse.Namespace) -> int:
    from iamrecycler.config import get_config
    from iamrecycler.errors import RecyclerError
    from iamrecycler.k8s.client import load_kube_config
    from iamrecycler.models import RotationPolicy, RotationState
    from iamrecycler.operator import build_reconciler

    _configure_logging()
    cfg = get_config()

    try:
        policy = RotationPolicy(
            secret_name=args.secret,
            access_key_field=args.access_key_field,
            secret_key_field=args.secret_key_field,
            identity_name=args.iam_user,
            recycle_interval_minutes=1,
            namespace=args.namespace,
        )
        load_kube_config(cfg.kube)
        result = build_reconciler(cfg).reconcile(policy, RotationState())
    except RecyclerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Rotated {args.iam_user}: new access key {result.credential_id}")
    print(f"Secret {args.namespace}/{args.secret} updated")
    return 0


if __name__ == "__main__":
    sys.exit(main())

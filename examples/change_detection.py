"""Example: Change detection with structure digests.

Builds two configurations that differ only in mapping order, set-tagged list
order and an ignored identifier, shows that they share one digest, then
changes a hashed field and shows that the digest moves.
"""

import argparse
from dataclasses import dataclass, field

from structhash import Format, HashOptions, hash_hexdigest, hashfield


@dataclass
class Endpoint:
    host: str
    port: int


@dataclass
class ServiceConfig:
    name: str
    request_id: str = hashfield("ignore", default="")
    endpoints: dict[str, Endpoint] = field(default_factory=dict)
    regions: list[str] = hashfield("set", default_factory=list)
    fallback: Endpoint | None = None


def main():
    parser = argparse.ArgumentParser(
        description="Demonstrate order-independent structure digests"
    )
    parser.add_argument(
        "--format",
        type=str,
        choices=[f.name.lower() for f in Format if f is not Format.INVALID],
        default="md5",
        help="Digest format (default: md5)",
    )
    parser.add_argument(
        "--zero-nil",
        action="store_true",
        help="Treat a missing fallback like an empty endpoint",
    )
    args = parser.parse_args()

    fmt = Format[args.format.upper()]
    opts = HashOptions(zero_nil=args.zero_nil)

    first = ServiceConfig(
        name="billing",
        request_id="req-1",
        endpoints={
            "primary": Endpoint("10.0.0.1", 443),
            "replica": Endpoint("10.0.0.2", 443),
        },
        regions=["eu-west", "us-east"],
    )
    second = ServiceConfig(
        name="billing",
        request_id="req-2",
        endpoints={
            "replica": Endpoint("10.0.0.2", 443),
            "primary": Endpoint("10.0.0.1", 443),
        },
        regions=["us-east", "eu-west"],
    )

    first_digest = hash_hexdigest(first, fmt, opts)
    second_digest = hash_hexdigest(second, fmt, opts)
    print(f"first digest:  {first_digest}")
    print(f"second digest: {second_digest}")
    print(f"Digests are equal: {first_digest == second_digest}")

    second.endpoints["replica"] = Endpoint("10.0.0.3", 443)
    changed_digest = hash_hexdigest(second, fmt, opts)
    print(f"changed digest: {changed_digest}")
    print(f"Change detected: {changed_digest != first_digest}")

    empty = ServiceConfig(name="billing", fallback=Endpoint("", 0))
    missing = ServiceConfig(name="billing", fallback=None)
    same = hash_hexdigest(empty, fmt, opts) == hash_hexdigest(missing, fmt, opts)
    print(f"Missing fallback equals empty fallback: {same}")


if __name__ == "__main__":
    main()

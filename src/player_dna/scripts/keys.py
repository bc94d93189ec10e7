"""Generate Ed25519 key pairs and sign login challenges from the command line."""
from __future__ import annotations

import argparse
import base64

from player_dna.services.crypto import CryptoService


def main() -> None:
    parser = argparse.ArgumentParser(description="Ed25519 key helper for the registry")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("generate", help="Print a new private key and its address")

    sign = sub.add_parser("sign", help="Sign a login challenge")
    sign.add_argument("private_key", help="Hex-encoded Ed25519 private key")
    sign.add_argument("challenge", help="Challenge string from /auth/challenge")

    args = parser.parse_args()

    if args.command == "generate":
        private_hex, address = CryptoService.generate_key_pair()
        print(f"private_key={private_hex}")
        print(f"address={address}")
        return

    # Login signs the raw challenge bytes, not the base64 text.
    challenge = base64.urlsafe_b64decode(args.challenge + "=" * (-len(args.challenge) % 4))
    print(CryptoService.sign_message_hex(args.private_key, challenge).hex())


if __name__ == "__main__":
    main()

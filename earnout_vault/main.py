import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path

from earnout_vault.config.settings import Settings
from earnout_vault.errors import EarnoutVaultError
from earnout_vault.logging.logger import Log
from earnout_vault.services import Services, build_services
from earnout_vault.sui.models import DealRole
from earnout_vault.walrus.models import BlobMetadata


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="earnout-vault",
        description="Encrypted document vault for earnout deals.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    upload = commands.add_parser("upload", help="encrypt and store a document")
    upload.add_argument("file", type=Path)
    upload.add_argument("--deal", required=True)
    upload.add_argument("--period", required=True)
    upload.add_argument("--data-type", required=True)
    upload.add_argument("--uploader", default="")

    download = commands.add_parser("download", help="verify access, fetch and decrypt a document")
    download.add_argument("blob_id")
    download.add_argument("--deal", required=True)
    download.add_argument("--user", required=True)
    download.add_argument("--role", choices=[role.value for role in DealRole])
    download.add_argument("-o", "--output", type=Path, required=True)

    info = commands.add_parser("info", help="show stored blob metadata")
    info.add_argument("blob_id")

    cost = commands.add_parser("cost", help="quote storage cost")
    cost.add_argument("size", type=int)
    cost.add_argument("--epochs", type=int)

    blobs = commands.add_parser("blobs", help="list documents registered on a deal")
    blobs.add_argument("deal_id")

    audits = commands.add_parser("audits", help="list audit records of a deal")
    audits.add_argument("deal_id")
    audits.add_argument("--blob")

    verify = commands.add_parser("verify", help="check a participant's access to a deal")
    verify.add_argument("deal_id")
    verify.add_argument("address")
    verify.add_argument("--role", choices=[role.value for role in DealRole])
    return parser


def _emit(payload: object) -> None:
    print(json.dumps(payload, indent=2, default=str))


def run(services: Services, args: argparse.Namespace) -> None:
    """Dispatch one parsed command against the built services."""
    if args.command == "upload":
        metadata = BlobMetadata(
            deal_id=args.deal,
            period_id=args.period,
            data_type=args.data_type,
            filename=args.file.name,
            uploader_address=args.uploader,
        )
        stored = services.documents.upload_document(args.file.read_bytes(), metadata)
        _emit(asdict(stored))
    elif args.command == "download":
        role = DealRole(args.role) if args.role else None
        plaintext = services.documents.download_document(
            args.deal, args.blob_id, args.user, role
        )
        args.output.write_bytes(plaintext)
        _emit({"blob_id": args.blob_id, "bytes": len(plaintext), "output": str(args.output)})
    elif args.command == "info":
        _emit(asdict(services.storage.get_blob_info(args.blob_id)))
    elif args.command == "cost":
        quote = services.storage.calculate_storage_cost(args.size, args.epochs)
        _emit({**asdict(quote), "total_cost": quote.total_cost})
    elif args.command == "blobs":
        _emit(
            [
                {**asdict(doc.reference), "audited": doc.audited}
                for doc in services.documents.list_documents(args.deal_id)
            ]
        )
    elif args.command == "audits":
        if args.blob:
            record = services.ledger.get_blob_audit_record(args.deal_id, args.blob)
            _emit(asdict(record) if record else None)
        else:
            _emit([asdict(r) for r in services.ledger.get_deal_audit_records(args.deal_id)])
    elif args.command == "verify":
        role = DealRole(args.role) if args.role else None
        _emit(asdict(services.verifier.verify_access(args.deal_id, args.address, role)))


def main(argv: list[str] | None = None) -> int:
    """Entry point: load settings -> build services -> run one command -> close."""
    args = _build_parser().parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)

    try:
        with build_services(settings) as services:
            run(services, args)
    except EarnoutVaultError as exc:
        Log.error(f"{args.command} failed: {exc}")
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

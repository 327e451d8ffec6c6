"""CLI tool for admin operations.

Usage:
    python -m journal.cli create-user [--no-totp]
"""

import sys
import getpass

from sqlmodel import Session, select

from journal.database import engine, create_db_and_tables
from journal.models.user import User
from journal.services.auth import hash_password, generate_totp_secret, get_totp_uri


def create_user(with_totp: bool = True):
    """Create a journal user, optionally with TOTP setup."""
    create_db_and_tables()

    username = input("Username: ").strip()
    if not username:
        print("Username cannot be empty.")
        sys.exit(1)

    with Session(engine) as session:
        existing = session.exec(select(User).where(User.username == username)).first()
        if existing:
            print(f"User '{username}' already exists.")
            sys.exit(1)

    password = getpass.getpass("Password: ")
    password_confirm = getpass.getpass("Confirm password: ")
    if password != password_confirm:
        print("Passwords do not match.")
        sys.exit(1)

    totp_secret = generate_totp_secret() if with_totp else None

    user = User(
        username=username,
        hashed_password=hash_password(password),
        totp_secret=totp_secret,
    )

    with Session(engine) as session:
        session.add(user)
        session.commit()
        session.refresh(user)

    print(f"\nUser '{username}' created with id {user.id}.")
    if totp_secret is None:
        return

    totp_uri = get_totp_uri(totp_secret, username)
    print(f"\nTOTP Secret: {totp_secret}")
    print(f"TOTP URI: {totp_uri}")
    print("\nScan the QR code below with your authenticator app:")

    import qrcode
    qr = qrcode.QRCode(box_size=1, border=1)
    qr.add_data(totp_uri)
    qr.make(fit=True)
    qr.print_ascii(invert=True)


def main(argv: list[str] | None = None):
    args = sys.argv[1:] if argv is None else argv
    if not args:
        print("Usage: python -m journal.cli <command> [--no-totp]")
        print("Commands: create-user")
        sys.exit(1)

    command = args[0]
    if command == "create-user":
        create_user(with_totp="--no-totp" not in args[1:])
    else:
        print(f"Unknown command: {command}")
        sys.exit(1)


if __name__ == "__main__":
    main()

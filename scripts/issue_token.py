"""Issue an access token for an existing user.

Password and social sign-in are not part of this service. This covers local
development and bootstrapping the first admin, who can then grant roles
through `PUT /api/v1/update-role/{id}`.

Usage:
    python -m scripts.issue_token admin@example.com
    python -m scripts.issue_token admin@example.com --promote ADMIN
"""

import asyncio
import sys

from sqlalchemy import select

from blogdesk.core.security import create_access_token
from blogdesk.db.session import async_session_factory, engine
from blogdesk.models.user import Role, User


async def issue_token(email: str, promote: str | None = None) -> None:
    async with async_session_factory() as db:
        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()

        if not user:
            print(f"No user found for email={email}")
            return

        if promote:
            user.role = Role(promote)
            await db.commit()
            print(f"Role set to {user.role}")

        token = create_access_token({"sub": str(user.id)})
        print(f"User #{user.id} ({user.name}, {user.role})")
        print(f"\n{token}\n")

    await engine.dispose()


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python -m scripts.issue_token <email> [--promote ROLE]")
        sys.exit(1)

    role = None
    if "--promote" in sys.argv:
        idx = sys.argv.index("--promote")
        if idx + 1 >= len(sys.argv):
            print("--promote needs a role: USER, AUTHOR or ADMIN")
            sys.exit(1)
        role = sys.argv[idx + 1].upper()

    asyncio.run(issue_token(sys.argv[1], role))

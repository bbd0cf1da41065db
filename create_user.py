"""
Provision a user and print an access token
Stands in for the OAuth callback when running locally
"""
import argparse
import asyncio
import sys
sys.path.insert(0, '.')

from sqlalchemy import select

from app.models.database import async_session_maker, init_db
from app.models.user import User, UserRole, AuthProvider
from app.core.security import create_token_pair


async def create_user(email: str, first_name: str, last_name: str, admin: bool):
    # Initialize DB tables first
    await init_db()

    async with async_session_maker() as session:
        result = await session.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()

        if user is None:
            user = User(
                email=email,
                first_name=first_name,
                last_name=last_name,
                role=UserRole.ADMIN if admin else UserRole.CLIENT,
                provider=AuthProvider.LOCAL,
                is_active=True,
                is_email_verified=True
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
            print(f"User created: {user.email}")
        else:
            print(f"User already exists: {user.email}")

        access_token, refresh_token = create_token_pair(user)
        print(f"Access token:  {access_token}")
        print(f"Refresh token: {refresh_token}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("email")
    parser.add_argument("--first-name", default="Local")
    parser.add_argument("--last-name", default="User")
    parser.add_argument("--admin", action="store_true")
    args = parser.parse_args()

    asyncio.run(create_user(args.email, args.first_name, args.last_name, args.admin))

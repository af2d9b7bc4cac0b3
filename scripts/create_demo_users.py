#!/usr/bin/env python3
"""
Create the demo accounts for local development and print their access tokens.

Usage:
    MONGODB_URL=mongodb://localhost:27017/study_notes JWT_SECRET_KEY=... \
        python scripts/create_demo_users.py
"""

import asyncio
import sys

from studynotes_chat.core.auth import create_access_token
from studynotes_chat.core.database import Database
from studynotes_chat.models.user import User, UserRole

DEMO_USERS = [
    {"name": "Admin User", "email": "admin@studyhub.com", "role": UserRole.ADMIN},
    {"name": "Demo Student", "email": "student@studyhub.com", "role": UserRole.USER},
]


async def create_demo_users() -> None:
    try:
        await Database.connect_to_mongo()

        for account in DEMO_USERS:
            user = await User.find_one(User.email == account["email"])
            if user is None:
                user = User(**account)
                await user.insert()
                print(f"✅ Created {account['role'].value} user {account['email']}")
            else:
                print(f"ℹ️  {account['email']} already exists")

            print(f"   User ID: {user.id}")
            print(f"   Token:   {create_access_token(user.id)}")
    except Exception as e:
        print(f"❌ Error creating demo users: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        await Database.close_mongo_connection()


if __name__ == "__main__":
    asyncio.run(create_demo_users())

"""Database seeding script (sample group, members and entries)"""
import asyncio
import sys
from decimal import Decimal
from pathlib import Path

# Add parent directory to path to import app modules
sys.path.append(str(Path(__file__).parent.parent))

from app.config import get_settings
from app.database import AsyncSessionLocal, init_models
from app.schemas.expense import EntryCreate, LineItem, SettlementCreate, SplitInput, SplitStrategy
from app.schemas.group import MemberCreate
from app.services.expense_service import ExpenseService
from app.services.group_service import GroupService

settings = get_settings()

MEMBERS = [
    {
        "name": "Alice",
        "bank_name": "Vietcombank",
        "account_name": "NGUYEN THI ALICE",
        "account_no": "1234567890",
    },
    {
        "name": "Bob",
        "bank_name": "VietinBank",
        "account_name": "TRAN VAN BOB",
        "account_no": "9876543210",
    },
    {"name": "Charlie"},
]


async def seed_members(session) -> dict:
    """Add the sample members that are not in the group yet"""
    group = await GroupService.get_group(session, settings.default_group_id)
    members = {}

    for member_data in MEMBERS:
        existing = group.find_by_name(member_data["name"])
        if existing:
            print(f"  ⏭️  Member '{existing.name}' already exists, skipping...")
            members[existing.name] = existing
            continue

        member = await GroupService.add_member(
            session, group.id, MemberCreate(**member_data)
        )
        print(f"  ✅ Added member '{member.name}' ({member.id})")
        members[member.name] = member

    return members


async def seed_entries(session, members: dict) -> None:
    """Record a handful of entries covering each split style"""
    group_id = settings.default_group_id
    entries, _ = await ExpenseService.list_entries(session, group_id, include_deleted=True)
    if entries:
        print(f"  ⏭️  Group already has {len(entries)} entries, skipping...")
        return

    alice, bob, charlie = members["Alice"], members["Bob"], members["Charlie"]

    samples = [
        (alice, EntryCreate(
            description="Lunch at restaurant",
            amount=Decimal("300"),
            paid_by=alice.id,
            strategy=SplitStrategy.EQUAL,
            splits=[SplitInput(member_id=m.id) for m in (alice, bob, charlie)],
            tags=["food"],
        )),
        (bob, EntryCreate(
            description="Coffee shop",
            amount=Decimal("150"),
            paid_by=bob.id,
            strategy=SplitStrategy.SHARES,
            splits=[
                SplitInput(member_id=alice.id, value=1),
                SplitInput(member_id=bob.id, value=2),
            ],
        )),
        (charlie, EntryCreate(
            description="Groceries",
            amount=Decimal("120"),
            paid_by=charlie.id,
            items=[
                LineItem(description="Rice", amount=Decimal("40"), owner_id=alice.id),
                LineItem(description="Fruit", amount=Decimal("50")),
                LineItem(description="Snacks", amount=Decimal("30"), owner_id=charlie.id),
            ],
        )),
    ]

    for creator, entry_data in samples:
        entry = await ExpenseService.create_entry(session, group_id, entry_data, creator.id)
        print(f"  ✅ Recorded '{entry.description}' ({entry.amount})")

    settlement = await ExpenseService.record_settlement(
        session,
        group_id,
        SettlementCreate(from_member_id=bob.id, to_member_id=alice.id, amount=Decimal("50")),
        bob.id,
    )
    print(f"  ✅ Recorded settlement Bob -> Alice ({settlement.amount})")


async def main():
    """Main function to run seeding"""
    print("🌱 Seeding database with sample ledger...\n")

    try:
        await init_models()
        async with AsyncSessionLocal() as session:
            members = await seed_members(session)
            await seed_entries(session, members)
        print("\n✨ Database seeding completed successfully!")
    except Exception as e:
        print(f"\n❌ Error seeding database: {str(e)}")
        raise


if __name__ == "__main__":
    asyncio.run(main())

"""Balance calculation logic"""

import json
import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.repositories.entry_repository import EntryRepository
from app.schemas.balance import BalanceSheet, MemberBalance, SettlementProposal
from app.schemas.group import Group
from app.services.balance_calculator import calculate_balances
from app.services.cache_service import CacheService
from app.services.group_service import GroupService
from app.services.settlement_planner import plan_settlements

logger = logging.getLogger(__name__)
settings = get_settings()


class BalanceService:
    """Service for balance calculation operations"""

    @staticmethod
    def _cache_key(group_id: str) -> str:
        return f"balances:{group_id}"

    @staticmethod
    def _serialize_balances(balances: List[MemberBalance]) -> str:
        """
        Serialize balances to JSON.

        Args:
            balances: Computed member balances

        Returns:
            JSON string
        """
        serializable = [
            {
                "member_id": b.member_id,
                "member_name": b.member_name,
                "confirmed": str(b.confirmed),
                "pending": str(b.pending),
            }
            for b in balances
        ]
        return json.dumps(serializable)

    @staticmethod
    def _deserialize_balances(json_str: str) -> List[MemberBalance]:
        """
        Deserialize balances from JSON.

        Args:
            json_str: JSON string

        Returns:
            List of MemberBalance
        """
        data = json.loads(json_str)
        return [
            MemberBalance(
                member_id=item["member_id"],
                member_name=item["member_name"],
                confirmed=Decimal(item["confirmed"]),
                pending=Decimal(item["pending"]),
            )
            for item in data
        ]

    @staticmethod
    async def compute_group_balances(
        group: Group, db: AsyncSession
    ) -> List[MemberBalance]:
        """
        Calculate balances from the stored entries, bypassing the cache.

        Args:
            group: Group snapshot
            db: Database session

        Returns:
            List of MemberBalance
        """
        entries = await EntryRepository.load(db, group.id)
        return calculate_balances(
            entries, group.members, include_deleted=settings.include_deleted_in_balances
        )

    @staticmethod
    async def get_group_balances(
        group_id: str, db: AsyncSession, use_cache: bool = True
    ) -> List[MemberBalance]:
        """
        Get balances of every member of the group.

        Args:
            group_id: Group ID
            db: Database session
            use_cache: Whether to use cache (default: True)

        Returns:
            List of MemberBalance in member order
        """
        group = await GroupService.get_group(db, group_id)

        if not use_cache:
            return await BalanceService.compute_group_balances(group, db)

        cache_key = BalanceService._cache_key(group_id)
        cached_data = await CacheService.get(cache_key)
        if cached_data:
            return BalanceService._deserialize_balances(cached_data)

        balances = await BalanceService.compute_group_balances(group, db)
        await CacheService.set(
            cache_key,
            BalanceService._serialize_balances(balances),
            ttl=settings.balance_cache_ttl,
        )
        return balances

    @staticmethod
    async def get_settlement_plan(
        group_id: str, db: AsyncSession, use_cache: bool = True
    ) -> List[SettlementProposal]:
        """
        Propose payments that zero the confirmed balances of the group.

        Args:
            group_id: Group ID
            db: Database session
            use_cache: Whether to use cache (default: True)

        Returns:
            Ordered list of SettlementProposal
        """
        balances = await BalanceService.get_group_balances(group_id, db, use_cache)
        return plan_settlements(balances)

    @staticmethod
    async def get_balance_sheet(
        group_id: str, db: AsyncSession, use_cache: bool = True
    ) -> BalanceSheet:
        """
        Balances plus settlement plan in one response.

        Args:
            group_id: Group ID
            db: Database session
            use_cache: Whether to use cache (default: True)

        Returns:
            BalanceSheet
        """
        group = await GroupService.get_group(db, group_id)
        balances = await BalanceService.get_group_balances(group_id, db, use_cache)

        return BalanceSheet(
            group_id=group.id,
            currency=group.currency,
            balances=balances,
            settlements=plan_settlements(balances),
        )

    @staticmethod
    async def get_member_balance(
        group_id: str, member_id: str, db: AsyncSession, use_cache: bool = True
    ) -> Optional[MemberBalance]:
        """Balance of a single member, None if not a member"""
        balances = await BalanceService.get_group_balances(group_id, db, use_cache)
        return next((b for b in balances if b.member_id == member_id), None)

    @staticmethod
    async def invalidate_group_balances(group_id: str) -> bool:
        """
        Invalidate cached balances of a group.

        Args:
            group_id: Group ID

        Returns:
            True if successful
        """
        logger.debug("Invalidating cached balances for group %s", group_id)
        return await CacheService.delete(BalanceService._cache_key(group_id))

"""Synthetic transaction list for the earnings statement table.

Pending transactions fill the last eight calendar days (today included);
complete ones are spread over older days. The list is cached per
(pending, complete, day) so it stays the same across reloads on one day.
"""

import json
import logging
import math
import random
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Optional

from details.GenerationDetails import GenerationDetails
from store.key_value_store import KeyValueStore


logger = logging.getLogger(__name__)

STATUS_PENDING = 'pending'
STATUS_COMPLETE = 'complete'
STATUS_REVERSED = 'reversed'

TYPE_PAYMENT = 'payment'
TYPE_TIP = 'tip'


@dataclass(frozen=True)
class Transaction:
    """One row of the earnings statement."""
    timestamp: datetime
    amount: float
    fee: float
    net: float
    type: str
    user_id: str
    status: str

    def days_remaining(self, today: date) -> int:
        """Days until a pending transaction's earnings become available (1 to 6)."""
        days_since = (today - self.timestamp.date()).days
        return max(1, 6 - days_since)

    def to_dict(self) -> dict:
        return {
            'timestamp': self.timestamp.isoformat(),
            'amount': self.amount,
            'fee': self.fee,
            'net': self.net,
            'type': self.type,
            'userId': self.user_id,
            'status': self.status,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Transaction':
        return cls(
            timestamp=datetime.fromisoformat(data['timestamp']),
            amount=float(data['amount']),
            fee=float(data['fee']),
            net=float(data['net']),
            type=data['type'],
            user_id=data['userId'],
            status=data['status'],
        )


class TransactionGenerator:
    """Generator for the transaction list shown under the earnings chart."""

    def __init__(self, details: GenerationDetails, store: Optional[KeyValueStore] = None,
                 rng: Optional[random.Random] = None):
        """Initialize the generator.

        Args:
            details: GenerationDetails holding the `transactions` section
            store: KeyValueStore used to cache generated lists (no caching if None)
            rng: Random source
        """
        self.details = details
        self.params = details.transactions
        self.store = store
        self.rng = rng or random.Random()

    @property
    def storage_key(self) -> str:
        return 'ofStats.transactions.snapshot'

    def cache_key(self, pending: int, complete: int, today: date) -> str:
        version = self.params.get('cacheVersion', 'transactions_v7')
        return f"{version}_{pending}_{complete}_{today.isoformat()}"

    def amount(self) -> int:
        """Whole-dollar amount drawn from the bucket distribution (small amounts most common)."""
        buckets = self.params.get('amountBuckets', [])
        roll = self.rng.random() * sum(b['weight'] for b in buckets)
        for bucket in buckets:
            roll -= bucket['weight']
            if roll < 0:
                return self.rng.randint(int(bucket['low']), int(bucket['high']))
        last = buckets[-1]
        return self.rng.randint(int(last['low']), int(last['high']))

    def _make(self, day: date, slot: int, per_day: int, status: str) -> Transaction:
        # Spread a day's transactions from late evening back towards midnight
        hour_slot = 23 - int(math.floor(slot / float(per_day) * 24))
        hour = max(0, min(23, hour_slot + self.rng.randint(-1, 0)))
        timestamp = datetime(day.year, day.month, day.day, hour,
                             self.rng.randint(0, 59), self.rng.randint(0, 59))
        amount = self.amount()
        fee_rate = self.params.get('feeRate', 0.20)
        return Transaction(
            timestamp=timestamp,
            amount=float(amount),
            fee=round(amount * fee_rate, 2),
            net=round(amount * (1 - fee_rate), 2),
            type=TYPE_PAYMENT if self.rng.random() < self.params.get('paymentShare', 0.70) else TYPE_TIP,
            user_id=f"u{self.rng.randint(100000000, 999999999)}",
            status=status,
        )

    def pending_per_day(self, pending: int) -> List[int]:
        """Even spread over the pending days; extras go to the most recent days."""
        days = int(self.params.get('pendingDays', 8))
        base, extra = divmod(pending, days)
        return [base + (1 if d < extra else 0) for d in range(days)]

    def complete_per_day(self, complete: int) -> List[int]:
        """Uneven spread of complete transactions over older days."""
        if complete <= 0:
            return []
        per_day = int(self.params.get('perCompleteDay', 10))
        days = max(int(math.ceil(complete / float(per_day))), int(self.params.get('minCompleteDays', 7)))
        counts = []
        remaining = complete
        for d in range(days):
            if d == days - 1:
                counts.append(remaining)
                break
            wanted = int(math.ceil(remaining / float(days - d) * self.rng.uniform(0.8, 1.2)))
            take = max(1, min(wanted, remaining)) if remaining > 0 else 0
            counts.append(take)
            remaining -= take
        return counts

    def generate(self, pending: int, complete: int, today: date) -> List[Transaction]:
        """Generate a fresh transaction list, newest first.

        Args:
            pending: Number of pending transactions (last 8 days)
            complete: Number of complete transactions (older than 7 days)
            today: Calendar day the list is generated for

        Returns:
            List of Transaction sorted by timestamp, newest first
        """
        if pending < 0 or complete < 0:
            raise ValueError(f"Transaction counts must not be negative: {pending}, {complete}")

        transactions = []
        for offset, count in enumerate(self.pending_per_day(pending)):
            day = today - timedelta(days=offset)
            for slot in range(count):
                transactions.append(self._make(day, slot, count, STATUS_PENDING))

        first_complete = int(self.params.get('pendingDays', 8))
        reversed_share = self.params.get('reversedShare', 0.02)
        for offset, count in enumerate(self.complete_per_day(complete)):
            day = today - timedelta(days=first_complete + offset)
            for slot in range(count):
                status = STATUS_REVERSED if self.rng.random() < reversed_share else STATUS_COMPLETE
                transactions.append(self._make(day, slot, count, status))

        transactions.sort(key=lambda t: t.timestamp, reverse=True)
        logger.info("Generated %d pending and %d complete transactions for %s", pending, complete, today.isoformat())
        return transactions

    def get_or_generate(self, pending: int, complete: int, today: date) -> List[Transaction]:
        """Return the cached list for these counts and day, generating it on a miss."""
        key = self.cache_key(pending, complete, today)
        cached = self._load(key)
        if cached is not None:
            return cached
        transactions = self.generate(pending, complete, today)
        if self.store is not None:
            self.store.set(self.storage_key, json.dumps({
                'key': key,
                'transactions': [t.to_dict() for t in transactions],
            }))
        return transactions

    def _load(self, key: str) -> Optional[List[Transaction]]:
        if self.store is None:
            return None
        text = self.store.get(self.storage_key)
        if text is None:
            return None
        try:
            data = json.loads(text)
            if data.get('key') != key:
                return None
            return [Transaction.from_dict(t) for t in data['transactions']]
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error("Discarding corrupt transaction cache entry: %s", e)
            self.store.remove(self.storage_key)
            return None

    def clear(self) -> None:
        if self.store is not None:
            self.store.remove(self.storage_key)

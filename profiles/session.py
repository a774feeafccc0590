"""Host session: binds a loaded profile to a table and saves results back."""

from blackjack.game.events import EventType, GameEvent
from blackjack.game.machine import RoundMachine
from config import AppConfig, config as default_config
from logging_utils import get_logger
from presentation.coordinator import PresentationCoordinator
from presentation.scheduler import Scheduler, TaskScheduler
from profiles.models import Profile
from profiles.store import ProfileSaveError, ProfileStore

log = get_logger(__name__)


class TableSession:
    """One player at the table, from profile load to the final save.

    The engine never writes storage itself; this session calls the
    store's ``save_balance`` after each settled round (when ``auto_save``
    is on), on profile switch and on close.
    """

    def __init__(
        self,
        store: ProfileStore,
        coordinator: PresentationCoordinator | None = None,
        scheduler: Scheduler | None = None,
        auto_save: bool | None = None,
        app_config: AppConfig | None = None,
    ) -> None:
        """
        Initialize the session.

        Args:
            store: Save layer that persists balances
            coordinator: Pre-built coordinator (one is built if omitted)
            scheduler: Scheduler for a built coordinator
            auto_save: Save after every settled round (defaults to config)
            app_config: Configuration (defaults to the global config)
        """
        cfg = app_config or default_config
        self.store = store
        if coordinator is None:
            machine = RoundMachine(payout_ratio=cfg.game.blackjack_payout)
            coordinator = PresentationCoordinator(
                machine,
                scheduler or TaskScheduler(),
                cfg.presentation,
            )
        self.coordinator = coordinator
        self.machine = coordinator.machine
        self.auto_save = cfg.auto_save if auto_save is None else auto_save
        self.profile: Profile | None = None

        self.machine.subscribe(self._on_round_settled, EventType.ROUND_SETTLED)

    def open(self, profile: Profile) -> None:
        """Seat a profile: clear the table and seed the balance."""
        self.coordinator.reset()
        self.profile = profile
        self.machine.update_coins(profile.current_balance)
        log.info("Opened profile %s with %d coins", profile.identity, profile.current_balance)

    def save(self) -> bool:
        """
        Write the current balance back through the store.

        Lifetime collected grows by whatever the balance gained since the
        last save; losses never reduce it.

        Returns:
            True if the store accepted the save
        """
        if self.profile is None:
            return False

        coins = self.machine.coins
        gained = max(0, coins - self.profile.current_balance)
        lifetime = self.profile.lifetime_collected + gained

        try:
            self.store.save_balance(self.profile.location, coins, lifetime)
        except ProfileSaveError:
            log.exception("Failed to save coins for %s", self.profile.identity)
            return False

        self.profile = self.profile.with_balance(coins, lifetime)
        log.debug("Saved %d coins for %s", coins, self.profile.identity)
        return True

    def switch_profile(self, profile: Profile) -> bool:
        """Save the current profile, then seat another one."""
        saved = self.save()
        self.open(profile)
        return saved

    def close(self) -> bool:
        """Save, cancel anything scheduled and clear the table."""
        saved = self.save()
        self.coordinator.reset()
        self.profile = None
        return saved

    def _on_round_settled(self, event: GameEvent) -> None:
        if self.auto_save:
            self.save()

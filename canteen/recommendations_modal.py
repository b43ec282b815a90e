"""Food recommendations modal screen."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from canteen.errors import UpstreamError
from canteen.models import Order
from canteen.recommendations import Recommender, fetch_recommendations


class RecommendationsModal(ModalScreen[None]):
    """Type dietary preferences, then ask the recommender without blocking the UI."""

    CSS = """
    RecommendationsModal {
        align: center middle;
        background: $background 60%;
    }

    #recs-dialog {
        width: 70;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #recs-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #recs-preferences {
        border: heavy $secondary;
        padding: 0 1;
        color: white;
        margin-bottom: 1;
    }

    #recs-body {
        color: white;
        margin-bottom: 1;
    }

    #recs-help {
        color: #dddddd;
    }
    """

    def __init__(self, recommender: Recommender, orders: list[Order]) -> None:
        super().__init__()
        self.recommender = recommender
        self.orders = orders
        self.preferences = ""
        self.loading = False
        self.error: str | None = None
        self.suggestions: list[str] = []

    def compose(self) -> ComposeResult:
        with Container(id="recs-dialog"):
            yield Static("Food Recommendations", id="recs-title")
            yield Static(id="recs-preferences")
            yield Static(id="recs-body")
            yield Static("Type preferences (e.g. vegetarian), Enter ask, Esc close", id="recs-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        event.stop()
        if event.key in {"escape", "ctrl+c"}:
            self.dismiss(None)
            return

        if event.key == "enter":
            if not self.loading:
                self.loading = True
                self.error = None
                self.suggestions = []
                self.run_worker(self._fetch(self.preferences), exclusive=True)
            self._refresh_content()
            return

        if event.key == "backspace":
            self.preferences = self.preferences[:-1]
        elif event.is_printable and event.character:
            self.preferences += event.character
        self._refresh_content()

    async def _fetch(self, preferences: str) -> None:
        try:
            self.suggestions = await fetch_recommendations(self.recommender, self.orders, preferences)
        except UpstreamError:
            self.error = "Failed to get recommendations. Please try again."
        finally:
            self.loading = False
        self._refresh_content()

    def _refresh_content(self) -> None:
        self.query_one("#recs-preferences", Static).update(f"Preferences: {self.preferences}|")

        body = Text(style="white")
        if self.loading:
            body.append("Getting recommendations...", style="dim")
        elif self.error:
            body.append(self.error, style="#ffb3b3")
        elif self.suggestions:
            for idx, suggestion in enumerate(self.suggestions):
                if idx > 0:
                    body.append("\n")
                body.append(f"• {suggestion}")
        else:
            body.append("No recommendations yet.", style="dim")
        self.query_one("#recs-body", Static).update(body)

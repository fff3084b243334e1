"""CivicSim CLI Application.

A Textual-based terminal interface for playing civic simulations:
- Main menu
- Simulation selection (offers to resume saved progress)
- Step screen with choices and feedback
- Results with score, tier, badge and choice history
"""

from __future__ import annotations

import getpass
import logging
import os
from dataclasses import dataclass
from typing import Any, Optional

from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Vertical, VerticalScroll
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Markdown, OptionList, Rule, Static
from textual.widgets.option_list import Option

from civicsim.engine import SimulationEngine, SubmitOutcome
from civicsim.errors import InvalidProgressError, ProgressConflictError
from civicsim.models.attempt import Attempt
from civicsim.models.results import SimulationResult
from civicsim.models.simulation import Simulation
from civicsim.scenarios import BUILTIN_SIMULATIONS, SimulationRegistry
from civicsim.storage import ProgressStore, get_progress_repository, get_simulation_repository

logger = logging.getLogger(__name__)


# =============================================================================
# Session logic (no widgets)
# =============================================================================


@dataclass
class ChoiceOutcome:
    """Result of picking a choice in the terminal client."""

    outcome: SubmitOutcome
    warning: Optional[str] = None


class PlaySession:
    """Plays simulations for one local user, saving progress after every choice.

    Args:
        registry: Simulation lookup
        progress: Progress store
        user_id: Local user the progress belongs to
    """

    def __init__(self, registry: SimulationRegistry, progress: ProgressStore, user_id: str) -> None:
        self.registry = registry
        self.engine = SimulationEngine(registry)
        self.progress = progress
        self.user_id = user_id
        self.attempt: Optional[Attempt] = None
        self.simulation: Optional[Simulation] = None
        self.result: Optional[SimulationResult] = None

    def saved_progress(self, simulation_id: str) -> Optional[dict[str, Any]]:
        """Saved progress for a simulation, or None (also when unreadable)."""
        loaded = self.progress.load(self.user_id, simulation_id)
        return loaded.value if loaded.ok else None

    def start(self, simulation_id: str) -> Optional[str]:
        """Begin a fresh attempt. Returns a warning when it could not be saved."""
        view = self.engine.start(simulation_id, self.user_id)
        self.simulation = view.simulation
        self.attempt = view.attempt
        self.result = None
        saved = self.progress.save(self.user_id, view.simulation.id, view.attempt.to_progress())
        return None if saved.ok else "Progress could not be saved."

    def resume(self, simulation_id: str) -> Optional[str]:
        """Continue saved progress, starting over when it is missing or unusable."""
        persisted = self.saved_progress(simulation_id)
        if persisted is None:
            return self.start(simulation_id)
        try:
            view = self.engine.resume(simulation_id, self.user_id, persisted)
        except InvalidProgressError as e:
            logger.warning(f"Discarding unusable progress for {simulation_id}: {e}")
            self.start(simulation_id)
            return "Saved progress was unusable; starting over."
        self.simulation = view.simulation
        self.attempt = view.attempt
        self.result = view.result
        if view.completed:
            self.progress.delete(self.user_id, simulation_id)
        return None

    def choose(self, choice_id: str) -> ChoiceOutcome:
        """Submit a choice for the current step.

        Raises:
            ChoiceNotFoundError: If the choice is not offered at the step
            StepConflictError: If the attempt is already complete
        """
        if self.attempt is None:
            raise RuntimeError("No simulation in progress")
        step_number = self.attempt.current_step
        outcome = self.engine.submit_choice(self.attempt, step_number, choice_id)

        if outcome.completed:
            self.result = outcome.result
            self.progress.delete(self.user_id, self.attempt.simulation_id)
            return ChoiceOutcome(outcome)

        saved = self.progress.save(
            self.user_id, self.attempt.simulation_id, self.attempt.to_progress(), expected_step=step_number
        )
        if saved.ok:
            return ChoiceOutcome(outcome)
        if isinstance(saved.error, ProgressConflictError):
            return ChoiceOutcome(outcome, warning="Progress was changed elsewhere; this session was not saved.")
        return ChoiceOutcome(outcome, warning="Progress could not be saved.")


def format_result(result: SimulationResult) -> str:
    """Markdown summary of a completed simulation."""
    lines = [
        f"# {result.simulation_title}\n",
        f"**Score:** {result.total_score} / {result.max_possible_score} ({result.percentage}%)\n",
        f"**Performance:** {result.performance_level}\n",
        f"**Badge:** {result.badge}\n",
        f"**Time:** {result.duration_minutes} min\n",
        "\n## Your choices\n",
    ]
    for choice in result.choices:
        lines.append(f"- Step {choice.step}: {choice.text} (+{choice.points})\n")
    return "".join(lines)


# =============================================================================
# Theme and Styles
# =============================================================================

CSS = """
Screen {
    background: $surface;
}

#main-menu {
    align: center middle;
    width: 100%;
    height: 100%;
}

.menu-container {
    width: 70;
    height: auto;
    border: solid green;
    padding: 1 2;
}

.menu-title {
    text-align: center;
    text-style: bold;
    color: $success;
    margin-bottom: 1;
}

.menu-button {
    width: 100%;
    margin: 1 0;
}

#status-bar {
    dock: top;
    height: 1;
    background: $primary-darken-2;
    color: $text;
    padding: 0 1;
}

.step-title {
    text-style: bold;
    color: $secondary;
    margin-bottom: 1;
}

#feedback {
    border: heavy $warning;
    padding: 1;
    margin: 1 0;
    height: auto;
}

.choice-button {
    width: 100%;
    margin: 0 0 1 0;
}

OptionList {
    height: auto;
    max-height: 12;
}
"""


# =============================================================================
# Screens
# =============================================================================


class MainMenuScreen(Screen):
    """Main menu screen."""

    BINDINGS = [
        Binding("q", "quit", "Quit"),
    ]

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Container(id="main-menu"):
            with Vertical(classes="menu-container"):
                yield Static("CIVICSIM", classes="menu-title")
                yield Static("Practise civic decisions", classes="menu-title")
                yield Rule()
                yield Button("Play Simulation", id="play", classes="menu-button", variant="success")
                yield Button("Quit", id="quit", classes="menu-button", variant="error")
        yield Footer()

    @on(Button.Pressed, "#play")
    def play(self) -> None:
        self.app.push_screen(SimulationSelectScreen())

    @on(Button.Pressed, "#quit")
    def quit_app(self) -> None:
        self.app.exit()


class SimulationSelectScreen(Screen):
    """Screen for selecting a simulation."""

    BINDINGS = [
        Binding("escape", "go_back", "Back"),
    ]

    def compose(self) -> ComposeResult:
        yield Header()
        with Container(id="main-menu"):
            with Vertical(classes="menu-container"):
                yield Static("SELECT SIMULATION", classes="menu-title")
                yield Rule()
                yield OptionList(id="simulation-list")
                yield Rule()
                yield Button("Back", id="back", variant="default")
        yield Footer()

    def on_mount(self) -> None:
        option_list = self.query_one("#simulation-list", OptionList)
        for summary in self.app.session.registry.summaries():
            label = f"{summary['title']} ({summary['total_steps']} steps, {summary['difficulty']})"
            option_list.add_option(Option(label, id=summary["id"]))

    @on(OptionList.OptionSelected)
    def simulation_selected(self, event: OptionList.OptionSelected) -> None:
        simulation_id = str(event.option.id)
        if self.app.session.saved_progress(simulation_id) is not None:
            self.app.push_screen(ResumePromptScreen(simulation_id))
        else:
            self.app.open_simulation(simulation_id, resume=False)

    @on(Button.Pressed, "#back")
    def go_back(self) -> None:
        self.app.pop_screen()

    def action_go_back(self) -> None:
        self.app.pop_screen()


class ResumePromptScreen(Screen):
    """Offer to resume saved progress or start over."""

    BINDINGS = [
        Binding("escape", "go_back", "Back"),
    ]

    def __init__(self, simulation_id: str) -> None:
        super().__init__()
        self.simulation_id = simulation_id

    def compose(self) -> ComposeResult:
        saved = self.app.session.saved_progress(self.simulation_id) or {}
        yield Header()
        with Container(id="main-menu"):
            with Vertical(classes="menu-container"):
                yield Static("SAVED PROGRESS FOUND", classes="menu-title")
                yield Static(
                    f"You stopped at step {saved.get('current_step', 1)} "
                    f"with {saved.get('total_score', 0)} points."
                )
                yield Rule()
                yield Button("Resume", id="resume", classes="menu-button", variant="success")
                yield Button("Start Over", id="restart", classes="menu-button", variant="warning")
        yield Footer()

    @on(Button.Pressed, "#resume")
    def resume(self) -> None:
        self.app.pop_screen()
        self.app.open_simulation(self.simulation_id, resume=True)

    @on(Button.Pressed, "#restart")
    def restart(self) -> None:
        self.app.pop_screen()
        self.app.open_simulation(self.simulation_id, resume=False)

    def action_go_back(self) -> None:
        self.app.pop_screen()


class StepScreen(Screen):
    """Plays the current step of the session's attempt."""

    BINDINGS = [
        Binding("escape", "go_back", "Menu"),
    ]

    def compose(self) -> ComposeResult:
        yield Static("", id="status-bar")
        yield Header()
        with VerticalScroll():
            yield Static("", id="step-title", classes="step-title")
            yield Static("", id="step-description")
            yield Static("", id="feedback")
            yield Vertical(id="choices")
        yield Footer()

    async def on_mount(self) -> None:
        await self._render_step()

    async def _render_step(self) -> None:
        session = self.app.session
        attempt = session.attempt
        step = session.simulation.get_step(attempt.current_step)
        progress = session.engine.progress(attempt)

        self.query_one("#status-bar", Static).update(
            f"{session.simulation.title} | Step {attempt.current_step}/{attempt.total_steps} "
            f"| Score {attempt.score} | {progress.percentage}% complete"
        )
        self.query_one("#step-title", Static).update(f"{step.image} {step.title}")
        self.query_one("#step-description", Static).update(step.description)

        choices = self.query_one("#choices", Vertical)
        await choices.remove_children()
        await choices.mount(*[
            Button(choice.text, name=choice.id, classes="choice-button", variant="primary")
            for choice in step.choices
        ])

    @on(Button.Pressed, ".choice-button")
    async def choice_pressed(self, event: Button.Pressed) -> None:
        result = self.app.session.choose(event.button.name)
        if result.warning:
            self.notify(result.warning, severity="warning")

        outcome = result.outcome
        feedback = f"{outcome.feedback['feedback']} (+{outcome.feedback['points']} points)"
        if outcome.feedback.get("consequences"):
            feedback += f"\n{outcome.feedback['consequences']}"
        self.query_one("#feedback", Static).update(feedback)

        if outcome.completed:
            self.app.switch_screen(ResultsScreen(outcome.result))
        else:
            await self._render_step()

    def action_go_back(self) -> None:
        self.app.pop_screen()


class ResultsScreen(Screen):
    """Final score, performance tier, badge and choice history."""

    BINDINGS = [
        Binding("escape", "go_back", "Menu"),
    ]

    def __init__(self, result: SimulationResult) -> None:
        super().__init__()
        self.result = result

    def compose(self) -> ComposeResult:
        yield Header()
        with VerticalScroll():
            yield Markdown(format_result(self.result), id="results")
            yield Button("Main Menu", id="menu", variant="success")
        yield Footer()

    @on(Button.Pressed, "#menu")
    def go_back(self) -> None:
        self.app.pop_screen()

    def action_go_back(self) -> None:
        self.app.pop_screen()


# =============================================================================
# Main Application
# =============================================================================


class CivicSimApp(App):
    """Main civicsim CLI application."""

    TITLE = "CivicSim"
    SUB_TITLE = "Civic Education Simulations"
    CSS = CSS

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", show=True, priority=True),
    ]

    def __init__(self, session: Optional[PlaySession] = None) -> None:
        super().__init__()
        self.session = session or PlaySession(
            SimulationRegistry(BUILTIN_SIMULATIONS, get_simulation_repository()),
            ProgressStore(get_progress_repository()),
            user_id=os.environ.get("CIVICSIM_USER") or getpass.getuser(),
        )

    def on_mount(self) -> None:
        """Show main menu when app starts."""
        self.push_screen(MainMenuScreen())

    def open_simulation(self, simulation_id: str, resume: bool) -> None:
        warning = self.session.resume(simulation_id) if resume else self.session.start(simulation_id)
        if warning:
            self.notify(warning, severity="warning")
        if self.session.result is not None:
            # Saved progress had answered every step
            self.push_screen(ResultsScreen(self.session.result))
            return
        self.push_screen(StepScreen())


def main() -> None:
    """Entry point for the CLI application.

    Progress is stored through the configured backend
    (CIVICSIM_STORAGE_BACKEND, CIVICSIM_PROGRESS_PATH).
    """
    app = CivicSimApp()
    if os.environ.get("TEXTUAL"):
        app.run(inline=False)
    else:
        app.run()


if __name__ == "__main__":
    main()

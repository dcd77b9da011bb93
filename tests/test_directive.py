import pytest

from agenttime.agent_core.agent import RoleFocus, build_system_directive, build_task_prompt, classify_role


@pytest.mark.parametrize(
    "name, role, expected",
    [
        ("Scout", "Research Analyst", RoleFocus.RESEARCH),
        ("Research Bot", "Helper", RoleFocus.RESEARCH),
        ("Ada", "Email Assistant", RoleFocus.MESSAGING),
        ("Ada", "Communications Lead", RoleFocus.MESSAGING),
        ("Cal", "Calendar Manager", RoleFocus.CALENDAR),
        ("Cal", "Scheduler", RoleFocus.CALENDAR),
        ("Gen", "Generalist", RoleFocus.GENERAL),
    ],
)
def test_classify_role(name: str, role: str, expected: RoleFocus) -> None:
    assert classify_role(name, role) is expected


def test_research_directive_discourages_private_integrations() -> None:
    directive = build_system_directive("Scout", "Research Analyst", "bob@example.com")

    assert directive.startswith("You are Scout, an AI agent with the role of Research Analyst.")
    assert "DO NOT use email or calendar tools." in directive
    assert "web_search" in directive and "fetch_webpage" in directive
    assert "Connected as" not in directive


def test_messaging_directive_reports_connection() -> None:
    connected = build_system_directive("Ada", "Email Assistant", "bob@example.com")
    disconnected = build_system_directive("Ada", "Email Assistant", None)

    assert "- Gmail: Connected as bob@example.com" in connected
    assert "- Gmail: Not connected" in disconnected


def test_calendar_directive() -> None:
    directive = build_system_directive("Cal", "Calendar Manager", None)

    assert "get_calendar_events" in directive
    assert "- Google Calendar: Not connected" in directive
    assert "Gmail" not in directive


def test_general_directive_lists_every_integration() -> None:
    directive = build_system_directive("Gen", "Generalist", "bob@example.com")

    assert "- Gmail: Connected as bob@example.com" in directive
    assert "- Google Calendar: Connected as bob@example.com" in directive
    assert "- Web Research: Always available (web_search, fetch_webpage)" in directive
    assert "log_progress" in directive


def test_task_prompt() -> None:
    assert build_task_prompt("Plan my week") == "Execute this task: Plan my week"

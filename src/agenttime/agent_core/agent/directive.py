"""System directive for an execution.

The role-based tool focus is guidance written into the prompt. It never filters the
catalog handed to the model.
"""

from enum import Enum
from typing import Optional

from ..tools.registry import (
    CREATE_CALENDAR_EVENT,
    FETCH_WEBPAGE,
    GET_CALENDAR_EVENTS,
    GET_EMAILS,
    SEND_EMAIL,
    WEB_SEARCH,
)


class RoleFocus(str, Enum):
    RESEARCH = "research"
    MESSAGING = "messaging"
    CALENDAR = "calendar"
    GENERAL = "general"


def classify_role(agent_name: str, agent_role: str) -> RoleFocus:
    """Keyword match on the agent's role (and name, for research)."""
    role = agent_role.lower()
    name = agent_name.lower()
    if "research" in role or "research" in name:
        return RoleFocus.RESEARCH
    if any(keyword in role for keyword in ("email", "communication", "assistant")):
        return RoleFocus.MESSAGING
    if any(keyword in role for keyword in ("calendar", "schedule")):
        return RoleFocus.CALENDAR
    return RoleFocus.GENERAL


def _connection(principal: Optional[str]) -> str:
    return f"Connected as {principal}" if principal else "Not connected"


def _role_instructions(focus: RoleFocus, principal: Optional[str]) -> str:
    if focus is RoleFocus.RESEARCH:
        return f"""
As a Research Analyst, your primary tools are:
- {WEB_SEARCH.name}: Search the internet for current information, news, and articles
- {FETCH_WEBPAGE.name}: Read full content from specific URLs you find

DO NOT use email or calendar tools. Focus on web research to gather information and provide comprehensive reports.
When researching, search for multiple sources and synthesize the information into a clear summary."""

    if focus is RoleFocus.MESSAGING:
        return f"""
Your primary tools for communication tasks are:
- {GET_EMAILS.name}: Read emails from the inbox
- {SEND_EMAIL.name}: Send emails to recipients

Available integrations:
- Gmail: {_connection(principal)}"""

    if focus is RoleFocus.CALENDAR:
        return f"""
Your primary tools for scheduling tasks are:
- {GET_CALENDAR_EVENTS.name}: View upcoming calendar events
- {CREATE_CALENDAR_EVENT.name}: Create new calendar events

Available integrations:
- Google Calendar: {_connection(principal)}"""

    return f"""
Available integrations:
- Gmail: {_connection(principal)}
- Google Calendar: {_connection(principal)}
- Web Research: Always available ({WEB_SEARCH.name}, {FETCH_WEBPAGE.name})"""


def build_system_directive(agent_name: str, agent_role: str, principal: Optional[str]) -> str:
    """Build the system prompt for one execution.

    Args:
        agent_name: Display name of the agent.
        agent_role: Free-text role of the agent.
        principal: The connected account, or None when no Google account is connected.
    """
    role_instructions = _role_instructions(classify_role(agent_name, agent_role), principal)
    return f"""You are {agent_name}, an AI agent with the role of {agent_role}.
You are executing a task scheduled by your user on their AgentTime calendar.

Your job is to:
1. Understand the task thoroughly
2. Use the appropriate tools for your role to complete it
3. Log your progress using the log_progress tool
4. Be thorough but efficient
{role_instructions}

Always start by logging what you're about to do, then execute, then log the result.
If an integration is not connected but needed, inform the user via a log message.

When presenting results, use markdown formatting for better readability:
- Use **bold** for important items
- Use bullet points for lists
- Use `code` for technical terms
- Use headers (##) to organize sections"""


def build_task_prompt(task: str) -> str:
    return f"Execute this task: {task}"

"""Client-visible text.

Clients are plain terminals (telnet/nc), so the exact wording and line breaks
here are the wire format.
"""

WELCOME = "Welcome! Please enter your name: "
NAME_EMPTY = "Name cannot be empty, please enter your name: "
NAME_TAKEN = "Name already taken, please enter a different name: "
AWAITING_OPPONENT = "You are awaiting an opponent...\n"

MATCH_STARTED = "Match started! Remember during your turn you have {seconds} seconds to attack.\n"

NO_POWER_MOVES = "No more power moves left!\n"
YOUR_POWER_MOVE_MISSED = "Your power move missed!\n"

SPEAK_PROMPT = "\nSpeak (max {limit} chars): "
MESSAGE_OVERFLOW = "\nMessage too long! Finish and hit enter.\n"
MESSAGE_TOO_LONG = "Message too long! Not sent.\n"
MESSAGE_EMPTY = "\nYou didn't say anything.\n"

ACTION_MENU = "(a)ttack\n(p)owermove\n(s)peak\n(t)ime left\n\n"


def entered_arena(name: str) -> str:
    return f"{name} has entered the arena.\n"


def left_arena(name: str) -> str:
    return f"{name} has left the arena.\n"


def match_started(seconds: float) -> str:
    return MATCH_STARTED.format(seconds=int(seconds))


def matched_with(opponent: str, first: bool) -> str:
    order = "first" if first else "second"
    return f"You are matched with {opponent}! Let the battle begin!\nYou go {order}.\n"


def status_prompt(hitpoints: int, powermoves: int, opponent_hitpoints: int) -> str:
    """Stats block plus the action menu, shown at match start and after chatting."""
    return (
        f"\n\nYour hitpoints: {hitpoints}\n"
        f"Your powermoves: {powermoves}\n"
        f"Opponent's hitpoints: {opponent_hitpoints}\n\n"
        f"{ACTION_MENU}"
    )


def turn_prompt(hitpoints: int, powermoves: int, opponent: str, opponent_hitpoints: int) -> str:
    """Shown to the player whose turn just started."""
    return (
        f"\nIt's your turn\n\n"
        f"Your hitpoints: {hitpoints}\n"
        f"Your powermoves: {powermoves}\n\n"
        f"{opponent}'s hitpoints: {opponent_hitpoints}\n\n"
        f"{ACTION_MENU}"
    )


def waiting_for(name: str) -> str:
    return f"Waiting for {name} to make a move...\n"


def you_attacked(opponent: str, damage: int) -> str:
    return f"\nYou attacked {opponent} for {damage} damage.\n"


def attacked_you(attacker: str, damage: int) -> str:
    return f"{attacker} attacked you for {damage} damage.\n"


def power_move_missed(attacker: str) -> str:
    return f"{attacker}'s power move missed!\n"


def you_defeated(loser: str) -> str:
    return f"You defeated {loser}! Congratulations!\n"


def defeated_you(winner: str) -> str:
    return f"{winner} defeated you. Better luck next time!\n"


def opponent_dropped(name: str) -> str:
    return f"{name} has dropped. You Won! You are back in the arena waiting for a new opponent.\n"


def says(name: str, message: str) -> str:
    return f"{name} says: {message}\n"


def remaining_time(seconds: int) -> str:
    return f"\nRemaining time: {seconds} seconds.\n"


def times_up_self() -> str:
    return "\nTime's up! You didn't make a move in time. 0 damage dealt. Wait till your turn.\n"


def times_up_opponent(name: str) -> str:
    return f"\nTime's up! {name} didn't make a move in time. 0 damage dealt. It's now your turn.\n"

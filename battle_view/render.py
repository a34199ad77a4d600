from .models import ViewSnapshot

CURRENT_MARKER = ">"


def render_snapshot(snapshot: ViewSnapshot) -> str:
    """Plain-text turn list for a terminal."""
    battle = snapshot.battle
    if battle is None:
        if snapshot.available_battles:
            names = ", ".join(f"{b.name} (#{b.id})" for b in snapshot.available_battles)
            return f"Battle not found. Live battles: {names}"
        return "Waiting for the battle to begin..."

    lines = [f"{battle.name} - Round {battle.current_round}", ""]
    if not battle.characters:
        lines.append("No combatants yet")

    for index, character in enumerate(battle.characters):
        marker = CURRENT_MARKER if index == battle.current_turn_index else " "
        label = f"{character.name} (lair)" if character.is_lair else character.name
        lines.append(f"{marker} {character.initiative:>3}  {label}")

    if len(snapshot.available_battles) > 1:
        others = [b for b in snapshot.available_battles if b.id != battle.id]
        lines.extend(["", "Other battles: " + ", ".join(f"{b.name} (#{b.id})" for b in others)])

    return "\n".join(lines)

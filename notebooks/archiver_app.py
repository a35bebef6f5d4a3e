import marimo

__generated_with = "0.13.10"
app = marimo.App(width="medium", app_title="Smart Archiver")


@app.cell
def _():
    import marimo as mo

    return (mo,)


# ---------------------------------------------------------------------------
# Bootstrap: paths, vault, settings
# ---------------------------------------------------------------------------


@app.cell
def _setup():
    import logging
    import os
    import sys
    from pathlib import Path

    _ROOT = Path(__file__).parent.parent
    _SRC = _ROOT / "src"

    if str(_SRC) not in sys.path:
        sys.path.insert(0, str(_SRC))

    from archiver.archive import COMMANDS, Archiver
    from archiver.note import NoteRef
    from archiver.settings import load_settings, save_settings
    from archiver.store import CollectingNotifier, FirstChooser, PresetChooser
    from archiver.vault import FileSystemVault

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    # Overridable so the UI tests can run against a scratch copy of the vault
    SETTINGS_PATH = Path(os.environ.get("ARCHIVER_SETTINGS", _ROOT / "archiver.json"))
    vault = FileSystemVault(Path(os.environ.get("ARCHIVER_VAULT_DIR", _ROOT / "vault")))
    return (
        Archiver,
        COMMANDS,
        CollectingNotifier,
        FirstChooser,
        NoteRef,
        PresetChooser,
        SETTINGS_PATH,
        load_settings,
        save_settings,
        vault,
    )


# ---------------------------------------------------------------------------
# Reactive state
# ---------------------------------------------------------------------------


@app.cell
def _state(mo, SETTINGS_PATH, load_settings):
    get_settings, set_settings = mo.state(load_settings(SETTINGS_PATH))
    get_refresh, set_refresh = mo.state(0)
    get_messages, set_messages = mo.state([])
    return get_messages, get_refresh, get_settings, set_messages, set_refresh, set_settings


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@app.cell
def _settings_panel(mo, get_settings, set_settings, save_settings, SETTINGS_PATH):
    def _setter(key):
        def _apply(value):
            updated = get_settings().update(key, value)
            save_settings(updated, SETTINGS_PATH)
            set_settings(updated)

        return _apply

    _current = get_settings()
    _fields = [
        ("template_folder", "Template folder"),
        ("archive_folder", "Archive folder"),
        ("archive_file_name_pattern", "Archive file name pattern"),
        ("processed_folder", "Processed folder"),
        ("processed_tag", "Processed tag"),
    ]
    settings_inputs = [
        mo.ui.text(value=getattr(_current, key), label=label, on_change=_setter(key), full_width=True)
        for key, label in _fields
    ]
    include_switch = mo.ui.switch(
        value=_current.include_original_content,
        label="Include original content",
        on_change=_setter("include_original_content"),
    )

    settings_panel = mo.vstack(
        [
            mo.md("## Settings"),
            *settings_inputs,
            include_switch,
            mo.md("_File name placeholders: `{{date}}`, `{{datetime}}`, `{{title}}`._"),
        ],
        gap="6px",
    )
    return (settings_panel,)


# ---------------------------------------------------------------------------
# Command form
# ---------------------------------------------------------------------------


@app.cell
def _command_form(mo, vault, get_settings, get_refresh, Archiver, COMMANDS, CollectingNotifier, FirstChooser):
    get_refresh()

    _templates = Archiver(vault, FirstChooser(), CollectingNotifier(), get_settings()).read_templates()
    _template_paths = tuple(t.note.path for t in _templates)
    _note_paths = [n.path for n in vault.list_markdown_notes() if n.path not in _template_paths]

    note_picker = mo.ui.dropdown(options=_note_paths, label="Active note")
    template_picker = mo.ui.dropdown(options=[t.label for t in _templates], label="Template")
    command_picker = mo.ui.dropdown(
        options={name: command_id for command_id, (name, _) in COMMANDS.items()},
        value=next(iter(COMMANDS.values()))[0],
        label="Command",
    )
    run_button = mo.ui.run_button(label="Run")

    command_panel = mo.vstack(
        [mo.md("## Archive"), note_picker, template_picker, command_picker, run_button],
        gap="6px",
    )
    return command_panel, command_picker, note_picker, run_button, template_picker


@app.cell
def _run_command(
    mo,
    vault,
    get_settings,
    set_refresh,
    set_messages,
    Archiver,
    CollectingNotifier,
    NoteRef,
    PresetChooser,
    note_picker,
    template_picker,
    command_picker,
    run_button,
):
    mo.stop(not run_button.value)

    _notifier = CollectingNotifier()
    _archiver = Archiver(vault, PresetChooser(template_picker.value), _notifier, get_settings())
    _source = NoteRef(note_picker.value) if note_picker.value else None
    _archiver.run(command_picker.value, _source)

    set_messages(_notifier.messages or ["Cancelled: no template selected."])
    set_refresh(lambda n: n + 1)
    return


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------


@app.cell
def _layout(mo, command_panel, settings_panel, get_messages):
    _messages = get_messages()
    _outcome = (
        mo.callout(mo.md("\n\n".join(_messages)), kind="info")
        if _messages
        else mo.md("_Pick a note, a template and a command, then press Run._")
    )

    mo.vstack(
        [
            mo.md("# Smart Archiver"),
            mo.hstack(
                [
                    mo.vstack([command_panel, _outcome], style={"flex": "1"}),
                    mo.vstack([settings_panel], style={"width": "360px"}),
                ],
                gap="24px",
                align="start",
            ),
        ]
    )
    return


if __name__ == "__main__":
    app.run()

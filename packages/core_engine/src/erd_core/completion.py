"""Shell completion scripts for the ``erd`` command."""

from typing import Dict, List

from erd_core.dialects import list_dialects

COMMANDS: Dict[str, str] = {
    "init": "create an empty diagram snapshot",
    "validate": "check a snapshot against the schema and lint rules",
    "generate": "generate DDL from a snapshot",
    "dialects": "list supported SQL dialects",
    "types": "list the data types of a dialect",
    "stats": "summarize a snapshot",
    "fmt": "rewrite a snapshot in canonical form",
    "completion": "print a shell completion script",
}
GENERATE_SUBCOMMANDS = ["sql"]
SHELLS = ["bash", "zsh", "fish"]
FORMATS = ["json", "yaml"]


def _dialect_ids() -> List[str]:
    return [config.id for config in list_dialects()]


def generate_bash_completion() -> str:
    commands = " ".join(COMMANDS)
    generate_subs = " ".join(GENERATE_SUBCOMMANDS)
    dialects = " ".join(_dialect_ids())
    formats = " ".join(FORMATS)
    shells = " ".join(SHELLS)

    return f'''# bash completion for erd
# Add to ~/.bashrc: eval "$(erd completion bash)"

_erd_completions() {{
    local cur prev
    COMPREPLY=()
    cur="${{COMP_WORDS[COMP_CWORD]}}"
    prev="${{COMP_WORDS[COMP_CWORD-1]}}"

    case "${{COMP_WORDS[1]}}" in
        generate)
            if [[ $COMP_CWORD -eq 2 ]]; then
                COMPREPLY=( $(compgen -W "{generate_subs}" -- "$cur") )
                return 0
            fi
            ;;
        completion)
            COMPREPLY=( $(compgen -W "{shells}" -- "$cur") )
            return 0
            ;;
    esac

    case "$prev" in
        --dialect)
            COMPREPLY=( $(compgen -W "{dialects}" -- "$cur") )
            return 0
            ;;
        --format)
            COMPREPLY=( $(compgen -W "{formats}" -- "$cur") )
            return 0
            ;;
        --config)
            COMPREPLY=( $(compgen -f -X '!*.y*ml' -- "$cur") )
            return 0
            ;;
    esac

    if [[ $COMP_CWORD -eq 1 ]]; then
        COMPREPLY=( $(compgen -W "{commands}" -- "$cur") )
        return 0
    fi

    COMPREPLY=( $(compgen -f -- "$cur") )
    return 0
}}

complete -F _erd_completions erd
'''


def generate_zsh_completion() -> str:
    command_specs = "\n        ".join(f"'{name}:{help_text}'" for name, help_text in COMMANDS.items())
    generate_subs = " ".join(GENERATE_SUBCOMMANDS)
    dialects = " ".join(_dialect_ids())
    formats = " ".join(FORMATS)
    shells = " ".join(SHELLS)

    return f'''#compdef erd
# zsh completion for erd
# Add to ~/.zshrc: eval "$(erd completion zsh)"

_erd() {{
    local -a commands
    commands=(
        {command_specs}
    )

    _arguments -C \\
        '1:command:->command' \\
        '*::arg:->args'

    case $state in
        command)
            _describe 'erd commands' commands
            ;;
        args)
            case $words[1] in
                generate)
                    _values 'subcommand' {generate_subs}
                    ;;
                completion)
                    _values 'shell' {shells}
                    ;;
                *)
                    case $words[-2] in
                        --dialect)
                            _values 'dialect' {dialects}
                            ;;
                        --format)
                            _values 'format' {formats}
                            ;;
                        *)
                            _files
                            ;;
                    esac
                    ;;
            esac
            ;;
    esac
}}

_erd "$@"
'''


def generate_fish_completion() -> str:
    lines = [
        "# fish completion for erd",
        "# Add to ~/.config/fish/completions/erd.fish",
        "",
    ]
    for name, help_text in COMMANDS.items():
        lines.append(f"complete -c erd -n '__fish_use_subcommand' -a '{name}' -d '{help_text}'")

    lines.append("")
    for sub in GENERATE_SUBCOMMANDS:
        lines.append(f"complete -c erd -n '__fish_seen_subcommand_from generate' -a '{sub}'")
    for shell in SHELLS:
        lines.append(f"complete -c erd -n '__fish_seen_subcommand_from completion' -a '{shell}'")

    lines.append("")
    for dialect in _dialect_ids():
        lines.append(f"complete -c erd -l dialect -a '{dialect}'")
    lines.append(f"complete -c erd -l format -a '{' '.join(FORMATS)}'")

    return "\n".join(lines) + "\n"


COMPLETION_GENERATORS = {
    "bash": generate_bash_completion,
    "zsh": generate_zsh_completion,
    "fish": generate_fish_completion,
}

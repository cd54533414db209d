"""Build ``droid exec`` argument lists and compose prompts with attachments."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from droid_sdk.config.models import (
    FileAttachment,
    OutputFormat,
    RunOptions,
    ThreadOptions,
    merge_options,
)


@dataclass
class SpawnOptions:
    """Everything needed to spawn one ``droid exec`` process."""

    prompt: str | None = None
    prompt_file: str | None = None
    session_id: str | None = None
    cwd: str | None = None
    droid_path: str | None = None
    timeout: float | None = None
    output_format: OutputFormat | None = None
    thread_options: ThreadOptions | None = None
    run_options: RunOptions | None = None
    attachments: list[FileAttachment] = field(default_factory=list)


def build_prompt_with_attachments(
    prompt: str | None,
    attachments: Sequence[FileAttachment] | None,
) -> str | None:
    """Prepend ``@path`` reference lines for *attachments* to *prompt*.

    Returns ``None`` when there is neither a prompt nor an attachment.
    """
    if not attachments:
        return prompt or None

    refs = []
    for attachment in attachments:
        ref = f"@{attachment.path}"
        if attachment.description:
            ref += f" ({attachment.description})"
        refs.append(ref)
    block = "\n".join(refs)

    if not prompt:
        return block
    return f"{block}\n\n{prompt}"


def build_args(options: SpawnOptions) -> list[str]:
    """Translate *options* into the ordered ``droid`` argument list."""
    args: list[str] = ["exec"]
    opts = merge_options(RunOptions, options.thread_options, options.run_options)

    if options.output_format:
        args.extend(["-o", options.output_format])
    if options.session_id:
        args.extend(["-s", options.session_id])
    if options.prompt_file:
        args.extend(["-f", options.prompt_file])
    if opts.model:
        args.extend(["-m", opts.model])
    if opts.autonomy_level and opts.autonomy_level != "default":
        args.extend(["--auto", opts.autonomy_level])
    if opts.reasoning_effort:
        args.extend(["-r", opts.reasoning_effort])
    if opts.use_spec:
        args.append("--use-spec")
    if opts.spec_model:
        args.extend(["--spec-model", opts.spec_model])
    if opts.spec_reasoning_effort:
        args.extend(["--spec-reasoning-effort", opts.spec_reasoning_effort])
    if opts.enabled_tools:
        args.extend(["--enabled-tools", ",".join(opts.enabled_tools)])
    if opts.disabled_tools:
        args.extend(["--disabled-tools", ",".join(opts.disabled_tools)])
    if opts.skip_permissions_unsafe:
        args.append("--skip-permissions-unsafe")
    if opts.cwd:
        args.extend(["--cwd", opts.cwd])

    attachments = options.attachments or opts.attachments or []
    prompt = build_prompt_with_attachments(options.prompt, attachments)
    if prompt:
        args.append(prompt)

    return args

"""
Compiler — Selected context + template → final prompt text

Deterministic and stateless: the same prompt and block snapshot always
produce the same result. Steps:

1. Walk the Selection Set's effective order, skipping dangling keys
2. Resolve each key to item or sub-item content, dropping blank pieces
3. Optionally wrap each piece in title tags, and the whole in a Context tag
4. Join pieces with a blank line
5. Replace every placeholder in the template with the context text

Character statistics:
- template_chars: length of the template
- context_chars: Selection Set total, independent of wrapping markup
- total_chars: length of the compiled text
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import structlog
import xxhash

from .keys import SelectionKey, SubItemKey
from .model import ContextBlock
from .prompt import PromptBlock

logger = structlog.get_logger(__name__)


PLACEHOLDER = "{{context}}"
LEGACY_PLACEHOLDER = "[КОНТЕКСТ]"
DEFAULT_PLACEHOLDERS = (PLACEHOLDER, LEGACY_PLACEHOLDER)


@dataclass
class CompileOptions:
    """Rendering knobs, normally filled from the compile config section."""
    placeholders: List[str] = field(default_factory=lambda: list(DEFAULT_PLACEHOLDERS))
    separator: str = "\n\n"
    context_title: str = "Context"


@dataclass
class CompiledPiece:
    """One resolved piece of context, in output order."""
    key: SelectionKey
    title: str
    content: str
    text: str

    @property
    def chars(self) -> int:
        return len(self.content)


@dataclass
class CompileResult:
    compiled: str
    context_chars: int
    template_chars: int
    total_chars: int
    placeholder_found: bool
    pieces: List[CompiledPiece] = field(default_factory=list)
    fingerprint: str = ""

    @property
    def context_unused(self) -> bool:
        """Context was selected but the template has nowhere to put it."""
        return self.context_chars > 0 and not self.placeholder_found

    def to_dict(self) -> Dict[str, Any]:
        return {
            "compiled": self.compiled,
            "contextChars": self.context_chars,
            "templateChars": self.template_chars,
            "totalChars": self.total_chars,
            "placeholderFound": self.placeholder_found,
            "pieces": [p.key.to_wire() for p in self.pieces],
            "fingerprint": self.fingerprint,
        }


def wrap_in_tag(title: str, content: str, heading: str = "###") -> str:
    """Render content as a headed, tagged section."""
    return f"{heading} {title}\n<{title}>\n{content}\n</{title}>"


def fingerprint(text: str) -> str:
    return xxhash.xxh64(text.encode("utf-8")).hexdigest()


class PromptCompiler:
    """
    Renders prompts against a snapshot of context blocks.

    Holds only options; nothing is cached between calls.
    """

    def __init__(self, options: Optional[CompileOptions] = None):
        self.options = options or CompileOptions()

    def _placeholder_pattern(self) -> Optional["re.Pattern"]:
        tokens = sorted({p for p in self.options.placeholders if p}, key=len, reverse=True)
        if not tokens:
            return None
        return re.compile("|".join(re.escape(t) for t in tokens))

    def resolve_pieces(
        self,
        prompt: PromptBlock,
        context_blocks: Sequence[ContextBlock],
        wrap_with_tags: bool = False
    ) -> List[CompiledPiece]:
        blocks_by_id = {block.id: block for block in context_blocks}
        pieces = []

        for key in prompt.selection.effective_order():
            block = blocks_by_id.get(key.block_id)
            if block is None:
                continue
            item = block.get_item(key.item_id)
            if item is None:
                continue

            if isinstance(key, SubItemKey):
                sub = item.get_sub_item(key.sub_item_id)
                if sub is None:
                    continue
                title, content, heading = sub.title, sub.content, "####"
            else:
                title, content, heading = item.title, item.content, "###"

            if not content.strip():
                continue
            text = wrap_in_tag(title, content, heading) if wrap_with_tags else content
            pieces.append(CompiledPiece(key=key, title=title, content=content, text=text))

        return pieces

    def compile(
        self,
        prompt: PromptBlock,
        context_blocks: Sequence[ContextBlock],
        wrap_with_tags: bool = False
    ) -> CompileResult:
        """
        Compile a prompt.

        Args:
            prompt: Template and selection to render
            context_blocks: Current block snapshot
            wrap_with_tags: Wrap each piece and the whole context in tags

        Returns:
            CompileResult with the text and character statistics

        Raises:
            TypeError: If prompt or context_blocks are not the expected types
        """
        if not isinstance(prompt, PromptBlock):
            raise TypeError(f"prompt must be a PromptBlock, got {type(prompt).__name__}")
        if isinstance(context_blocks, (str, bytes)) or not isinstance(context_blocks, (list, tuple)):
            raise TypeError("context_blocks must be a list of ContextBlock")
        for block in context_blocks:
            if not isinstance(block, ContextBlock):
                raise TypeError(f"context_blocks must contain ContextBlock, got {type(block).__name__}")

        pieces = self.resolve_pieces(prompt, context_blocks, wrap_with_tags)
        context_text = self.options.separator.join(p.text for p in pieces)
        if wrap_with_tags and context_text:
            title = self.options.context_title
            context_text = f"### {title}:\n<{title}>\n{context_text}\n</{title}>"

        # Single pass over the template; placeholder text inside the context stays as is.
        template = prompt.template
        compiled, replaced = template, 0
        pattern = self._placeholder_pattern()
        if pattern is not None:
            compiled, replaced = pattern.subn(lambda _: context_text, template)
        placeholder_found = replaced > 0

        result = CompileResult(
            compiled=compiled,
            context_chars=prompt.selection.total_chars(context_blocks),
            template_chars=len(template),
            total_chars=len(compiled),
            placeholder_found=placeholder_found,
            pieces=pieces,
            fingerprint=fingerprint(compiled),
        )
        logger.debug("prompt_compiled", prompt_id=prompt.id, pieces=len(pieces),
                     context_chars=result.context_chars, total_chars=result.total_chars,
                     placeholder_found=placeholder_found)
        return result


def compile_prompt(
    prompt: PromptBlock,
    context_blocks: Sequence[ContextBlock],
    wrap_with_tags: bool = False,
    options: Optional[CompileOptions] = None
) -> CompileResult:
    """Compile with a throwaway PromptCompiler."""
    return PromptCompiler(options).compile(prompt, context_blocks, wrap_with_tags)

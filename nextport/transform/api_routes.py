"""API-route adaptation for files placed under ``pages/api``.

Next.js serves the default export of every file there as a request
handler. A function already shaped ``(req, res)`` becomes that default
export; any other module keeps its exports and gains a method-switch
handler.
"""
from __future__ import annotations

import posixpath
import re

from ..models import ROLE_API, AnalysisResult
from .context import TransformContext

HANDLER_DEFAULT = re.compile(
    r"\bexport\s+default\s+(?:async\s+)?(?:function\b\s*[\w$]*\s*)?\(\s*(?:req|request)\b[^,)]*,\s*(?:res|response)\b"
)
HANDLER_FUNCTION = re.compile(
    r"\bexport\s+(default\s+)?(async\s+)?function\s+[\w$]+\s*\(\s*((?:req|request)\b[^,)]*),\s*((?:res|response)\b[^,)]*)\)"
)
DEFAULT_HANDLER_NAME = re.compile(r"\bexport\s+default\s+handler\b")
HANDLER_CONST = re.compile(r"\bexport\s+(?:const|let|var)\s+handler\s*=")
DEFAULT_EXPORT = re.compile(r"\bexport\s+default\b")

DEFAULT_FUNCTION = re.compile(r"\bexport\s+default\s+(async\s+)?function\b(\s*[\w$]+)?")
DEFAULT_CLASS = re.compile(r"\bexport\s+default\s+class\b")
DEFAULT_NAME = re.compile(r"\bexport\s+default\s+([A-Za-z_$][\w$]*)[ \t]*;?[ \t]*$", re.M)

HANDLER_TEMPLATE = """\

// Route handler for {endpoint}
export default function handler({params}) {{
  switch (req.method) {{
    case 'GET':
      return res.status(200).json({{ message: 'GET {endpoint}' }});
    case 'POST':
      return res.status(200).json({{ message: 'POST {endpoint}' }});
    default:
      res.setHeader('Allow', ['GET', 'POST']);
      return res.status(405).json({{ message: `Method ${{req.method}} not allowed` }});
  }}
}}
"""
TYPED_IMPORT = "import type { NextApiRequest, NextApiResponse } from 'next';\n"


def endpoint_for(context: TransformContext) -> str:
    """``pages/api/users/index.js`` -> ``/api/users``."""
    location = context.output_path or posixpath.join("pages/api", posixpath.basename(context.path))
    stem = posixpath.splitext(location)[0]
    if stem.startswith("pages/"):
        stem = stem[len("pages"):]
    if stem.endswith("/index"):
        stem = stem[:-len("/index")]
    return stem if stem.startswith("/") else "/" + stem


def module_name(path: str) -> str:
    """camelCase name for a module's former anonymous default export."""
    stem = posixpath.splitext(posixpath.basename(path))[0]
    words = [w for w in re.split(r"[^A-Za-z0-9]+", stem) if w] or ["module"]
    name = words[0][:1].lower() + words[0][1:] + "".join(w[:1].upper() + w[1:] for w in words[1:])
    if name[0].isdigit():
        name = "_" + name
    return name + "Api"


def _demote_default_export(text: str, path: str) -> str:
    """Turn the module's default export into a named one."""
    if DEFAULT_CLASS.search(text):
        return DEFAULT_CLASS.sub("export class", text, count=1)
    function = DEFAULT_FUNCTION.search(text)
    if function:
        name = function.group(2) or " " + module_name(path)
        return text[:function.start()] + f"export {function.group(1) or ''}function{name}" + text[function.end():]
    named = DEFAULT_NAME.search(text)
    if named:
        ident = named.group(1)
        if re.search(r"\bexport\s+(?:const|let|var|function|class)\s+" + re.escape(ident) + r"\b", text):
            return text[:named.start()] + text[named.end():].lstrip("\n")
        return text[:named.start()] + f"export {{ {ident} }};" + text[named.end():]
    return DEFAULT_EXPORT.sub(f"export const {module_name(path)} =", text, count=1)


def adapt_api_route(text: str, analysis: AnalysisResult, context: TransformContext) -> str:
    if context.role != ROLE_API or HANDLER_DEFAULT.search(text) or DEFAULT_HANDLER_NAME.search(text):
        return text

    has_default = DEFAULT_EXPORT.search(text) is not None
    function = HANDLER_FUNCTION.search(text)
    if function and (function.group(1) or not has_default):
        replacement = f"export default {function.group(2) or ''}function handler({function.group(3)}, {function.group(4)})"
        return text[:function.start()] + replacement + text[function.end():]
    if HANDLER_CONST.search(text) and not has_default:
        return text.rstrip("\n") + "\n\nexport default handler;\n"

    if has_default:
        text = _demote_default_export(text, context.path)
    typescript = context.path.endswith((".ts", ".tsx"))
    params = "req: NextApiRequest, res: NextApiResponse" if typescript else "req, res"
    if typescript and "NextApiRequest" not in text:
        text = TYPED_IMPORT + text
    handler = HANDLER_TEMPLATE.format(endpoint=endpoint_for(context), params=params)
    body = text.rstrip("\n")
    return body + "\n" + handler if body else handler.lstrip("\n")

"""HTML page listing the signed-in user's Drive files."""

from __future__ import annotations

from html import escape

from app.schemas.drive import DriveFile, DriveFileList

PAGE_TITLE = "Drive viewer 3000"

_PAGE = """<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <link rel="icon" href="data:image/svg+xml,<svg xmlns=%22http://www.w3.org/2000/svg%22 viewBox=%220 0 100 100%22><text y=%221.2em%22 font-size=%2270%22>&#128270;</text></svg>">
    <title>{title}</title>
    <style>
      body {{
        margin: 40px auto;
        max-width: 650px;
        line-height: 1.6;
        font-size: 18px;
        color: #444;
        padding: 0 10px
      }}
    </style>
  </head>
  <body>
    <h1>Files</h1>
    <form>
      <input name="q" placeholder="Search" value="{query}" />
      <input type="submit" value="&#128270;" />
    </form>
    <ul>
{items}
    </ul>
    <a href="/logout">Logout</a>
  </body>
</html>
"""


def _render_item(file: DriveFile) -> str:
    owners = " ".join(escape(owner.displayName) for owner in file.owners)
    return (
        "      <li>\n"
        f'        <a href="{escape(file.alternateLink)}">\n'
        f'          <img src="{escape(file.iconLink)}" /> <strong>{escape(file.title)}</strong>\n'
        f"          <small>{owners}</small>\n"
        "        </a>\n"
        "      </li>"
    )


def render_file_list(files: DriveFileList, query: str | None = None) -> str:
    return _PAGE.format(
        title=PAGE_TITLE,
        query=escape(query or ""),
        items="\n".join(_render_item(file) for file in files.items),
    )


__all__ = ["PAGE_TITLE", "render_file_list"]

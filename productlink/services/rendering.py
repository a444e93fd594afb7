from __future__ import annotations

"""Turn normalized records into a plain HTML listing."""

from html import escape
from typing import Any, Iterable, List

from productlink.schemas import DisplayRecord

FRAGMENT_SCRIPT = """\
    (function () {
      var status = document.getElementById("status");
      var list = document.getElementById("items");
      var params = new URLSearchParams(window.location.hash.slice(1));
      var token = params.get("d");
      function fail(message) {
        document.querySelector("h1").textContent = "Payload could not be loaded";
        status.textContent = message;
      }
      function row(label, value) {
        var dt = document.createElement("dt");
        var dd = document.createElement("dd");
        dt.textContent = label;
        dd.textContent = value == null ? "" : String(value);
        return [dt, dd];
      }
      function link(text, href, cls) {
        var a = document.createElement("a");
        a.className = cls;
        a.textContent = text;
        a.href = String(href);
        a.target = "_blank";
        a.rel = "noopener noreferrer";
        return a;
      }
      function card(item) {
        var div = document.createElement("div");
        div.className = "row";
        if (item.image_url) {
          var img = document.createElement("img");
          img.className = "prod";
          img.alt = "Product image";
          img.src = String(item.image_url);
          div.appendChild(img);
        }
        var title = document.createElement("div");
        title.className = "title";
        title.textContent = item.product == null ? "Untitled" : String(item.product);
        div.appendChild(title);
        var grid = document.createElement("dl");
        grid.className = "grid";
        [
          row("Discount", item.discount),
          row("Free?", item.is_free),
          row("Price", item.price ? "$" + item.price : ""),
          row("Compare At", item.compare_at_price ? "$" + item.compare_at_price : ""),
          row("Variant ID", item.variantId)
        ].forEach(function (pair) {
          grid.appendChild(pair[0]);
          grid.appendChild(pair[1]);
        });
        div.appendChild(grid);
        var btns = document.createElement("div");
        btns.className = "btns";
        if (item.website) btns.appendChild(link("Visit Website", item.website, "btn"));
        if (item.cartLink) btns.appendChild(link("Add to Cart", item.cartLink, "btn ok"));
        if (btns.childNodes.length) div.appendChild(btns);
        return div;
      }
      if (!token) {
        fail("The link does not carry a payload.");
        return;
      }
      fetch("__DECODE_PATH__", {
        method: "POST",
        headers: {"Content-Type": "application/json"},
        body: JSON.stringify({token: token})
      })
        .then(function (response) {
          return response.json().then(function (body) {
            if (!response.ok) throw new Error(body.error || "Invalid payload");
            return body;
          });
        })
        .then(function (body) {
          var count = body.items.length;
          status.textContent = count + (count === 1 ? " item" : " items") + " loaded";
          body.items.forEach(function (item) {
            list.appendChild(card(item));
          });
        })
        .catch(function (err) {
          fail(err.message);
        });
    })();"""


def _text(value: Any) -> str:
    if value is None:
        return ""
    return escape(str(value))


class ListingRenderer:
    """Builds the product card page served for stored and query-token links."""

    def build_page(
        self,
        records: Iterable[DisplayRecord],
        title: str = "Product Payload",
        subtitle: str | None = None,
    ) -> str:
        items: List[DisplayRecord] = list(records)
        count = len(items)
        lines: List[str] = [
            "<!DOCTYPE html>",
            '<html lang="en">',
            "<head>",
            '  <meta charset="UTF-8">',
            f"  <title>{_text(title)}</title>",
            "</head>",
            "<body>",
            f"  <h1>{_text(title)}</h1>",
        ]
        if subtitle:
            lines.append(f"  <p>{_text(subtitle)}</p>")
        lines.append(f"  <p class=\"muted\">{count} item{'' if count == 1 else 's'} loaded</p>")

        for record in items:
            lines.extend(self._card(record))

        lines.extend(["</body>", "</html>"])
        return "\n".join(lines)

    def build_error_page(self, message: str, title: str = "Payload could not be loaded") -> str:
        return "\n".join(
            [
                "<!DOCTYPE html>",
                '<html lang="en">',
                '<head><meta charset="UTF-8"><title>Error</title></head>',
                "<body>",
                f"  <h1>{_text(title)}</h1>",
                f"  <p>{_text(message)}</p>",
                "</body>",
                "</html>",
            ]
        )

    def build_fragment_page(
        self,
        decode_path: str = "/api/decode",
        title: str = "Product Payload",
    ) -> str:
        """Shell page for ``/v#d=<token>`` links.

        The fragment never reaches the server, so the page reads it in the
        browser, posts the token to ``decode_path`` and fills in the cards.
        All values are inserted through ``textContent``.
        """

        script = FRAGMENT_SCRIPT.replace("__DECODE_PATH__", decode_path)
        return "\n".join(
            [
                "<!DOCTYPE html>",
                '<html lang="en">',
                "<head>",
                '  <meta charset="UTF-8">',
                f"  <title>{_text(title)}</title>",
                "</head>",
                "<body>",
                f"  <h1>{_text(title)}</h1>",
                '  <p id="status" class="muted">Loading from link...</p>',
                '  <div id="items"></div>',
                "  <script>",
                script,
                "  </script>",
                "</body>",
                "</html>",
            ]
        )

    def _card(self, record: DisplayRecord) -> List[str]:
        price = f"${record.price}" if record.price else ""
        compare = f"${record.compare_at_price}" if record.compare_at_price else ""
        lines = ['  <div class="row">']
        if record.image_url:
            lines.append(f'    <img class="prod" alt="Product image" src="{_text(record.image_url)}"/>')
        lines.extend(
            [
                f'    <div class="title">{_text("Untitled" if record.product is None else record.product)}</div>',
                '    <dl class="grid">',
                f"      <dt>Discount</dt><dd>{_text(record.discount)}</dd>",
                f"      <dt>Free?</dt><dd>{_text(record.is_free)}</dd>",
                f"      <dt>Price</dt><dd>{_text(price)}</dd>",
                f"      <dt>Compare At</dt><dd>{_text(compare)}</dd>",
                f'      <dt>Variant ID</dt><dd class="mono">{_text(record.variantId)}</dd>',
                "    </dl>",
            ]
        )
        buttons = []
        if record.website:
            buttons.append(
                f'<a class="btn" href="{_text(record.website)}" target="_blank" rel="noopener noreferrer">Visit Website</a>'
            )
        if record.cartLink:
            buttons.append(
                f'<a class="btn ok" href="{_text(record.cartLink)}" target="_blank" rel="noopener noreferrer">Add to Cart</a>'
            )
        if buttons:
            lines.append(f'    <div class="btns">{"".join(buttons)}</div>')
        lines.append("  </div>")
        return lines

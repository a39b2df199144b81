"""JavaScript functions evaluated inside rendered pages.

These run in the page's isolated context: they cannot see any Python state,
so everything they need is passed in as a single JSON-serializable argument
and everything they return must be plain data.
"""

# Collect {title, url} pairs from the results page. Each node is handled in
# its own try block so one malformed result cannot abort the rest.
LINK_EXTRACTION_SCRIPT = """
(options) => {
    const links = [];

    const resolve = (href) => {
        const absolute = /^https?:/i.test(href);
        if (!absolute && !(options.allowRelative && href.startsWith("/"))) return null;
        let url;
        try {
            url = new URL(href, absolute ? undefined : options.origin);
        } catch (e) {
            return null;
        }
        if (options.redirectParam) {
            const target = url.searchParams.get(options.redirectParam);
            if (target) {
                try {
                    url = new URL(target);
                } catch (e) {
                    return null;
                }
            }
        }
        if (url.protocol !== "http:" && url.protocol !== "https:") return null;
        // navigation inside the search engine itself
        if (url.origin === options.origin) return null;
        return url.href;
    };

    let blocks = [];
    try {
        blocks = Array.from(document.querySelectorAll(options.blockSelector));
    } catch (e) {
        return links;
    }

    for (const block of blocks) {
        try {
            const anchor = block.matches(options.anchorSelector)
                ? block
                : block.querySelector(options.anchorSelector);
            const href = anchor && anchor.getAttribute("href");
            if (!href) continue;

            const titleEl = block.querySelector(options.titleSelector) || anchor;
            const title = (titleEl.textContent || "").trim();
            const url = resolve(href);
            if (!title || !url) continue;

            links.push({ title: title, url: url });
        } catch (e) {
            continue;
        }
    }
    return links;
}
"""

NOISE_SELECTORS = [
    "script,noscript,style,link,svg,img,video,iframe,canvas",
    ".reflist",  # wikipedia reference lists
    ".mw-editsection",
]

# Strip noise nodes and hand the cleaned document back for article extraction
CONTENT_CLEANUP_SCRIPT = """
(selectors) => {
    document.querySelectorAll(selectors.join(",")).forEach((el) => el.remove());
    const root = document.documentElement;
    return {
        html: root ? root.outerHTML : "",
        title: document.title || "",
    };
}
"""

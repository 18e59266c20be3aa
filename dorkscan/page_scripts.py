"""
JavaScript evaluated inside the browser page.

Every script is a single function taking one JSON-serializable argument
and returning a JSON-serializable value, so it works with any engine
exposing page.evaluate(script, arg).
"""

# arg: {selectors: [...], gridSelector: str}
# Returns raw page facts; ChallengeDetector decides what they mean.
DETECT_CHALLENGE = """
(cfg) => {
    if (!document.body) {
        return {text: '', bannerText: '', matchedSelector: null, tiles: 0};
    }
    const banner = document.getElementById('dorkscan-attention-banner');
    let matchedSelector = null;
    for (const selector of cfg.selectors) {
        if (document.querySelector(selector)) {
            matchedSelector = selector;
            break;
        }
    }
    return {
        text: document.body.innerText || '',
        bannerText: banner ? (banner.innerText || '') : '',
        matchedSelector: matchedSelector,
        tiles: document.querySelectorAll(cfg.gridSelector).length
    };
}
"""

# arg: milliseconds after which the observer removes itself
INSTALL_CHANGE_OBSERVER = """
(ttlMs) => {
    window.__dorkscanLastChange = Date.now();
    if (window.__dorkscanObserver) {
        window.__dorkscanObserver.disconnect();
    }
    const touch = () => { window.__dorkscanLastChange = Date.now(); };
    const observer = new MutationObserver(touch);
    if (document.body) {
        observer.observe(document.body, {attributes: true, childList: true, subtree: true});
    }
    const originalOpen = XMLHttpRequest.prototype.open;
    XMLHttpRequest.prototype.open = function () {
        touch();
        return originalOpen.apply(this, arguments);
    };
    const originalFetch = window.fetch;
    if (originalFetch) {
        window.fetch = function () {
            touch();
            return originalFetch.apply(this, arguments);
        };
    }
    const handle = {};
    const teardown = () => {
        observer.disconnect();
        // a newer install owns the hooks now
        if (window.__dorkscanObserver !== handle) {
            return;
        }
        XMLHttpRequest.prototype.open = originalOpen;
        if (originalFetch) {
            window.fetch = originalFetch;
        }
        window.__dorkscanObserver = null;
    };
    handle.disconnect = teardown;
    window.__dorkscanObserver = handle;
    setTimeout(teardown, ttlMs);
    return true;
}
"""

# arg: unused
SNAPSHOT_DOM = """
() => {
    const last = window.__dorkscanLastChange || Date.now();
    return {
        sinceChangeMs: Date.now() - last,
        domSize: document.body ? document.body.innerHTML.length : 0
    };
}
"""

REMOVE_CHANGE_OBSERVER = """
() => {
    if (window.__dorkscanObserver) {
        window.__dorkscanObserver.disconnect();
    }
    return true;
}
"""

# arg: banner text
SHOW_ATTENTION_BANNER = """
(message) => {
    if (!document.head || !document.body) {
        return false;
    }
    if (!document.getElementById('dorkscan-attention-style')) {
        const style = document.createElement('style');
        style.id = 'dorkscan-attention-style';
        style.textContent = `
            body {
                animation: dorkscan-flash 1s infinite alternate;
                box-shadow: 0 0 20px red !important;
                border: 5px solid red !important;
            }
            @keyframes dorkscan-flash {
                from { border-color: red; }
                to { border-color: yellow; }
            }
            #dorkscan-attention-banner {
                position: fixed; top: 0; left: 0; right: 0;
                background-color: rgba(255, 0, 0, 0.85);
                color: white; text-align: center; padding: 15px;
                font-size: 18px; font-weight: bold; z-index: 2147483647;
                box-shadow: 0 0 10px rgba(0, 0, 0, 0.5);
            }
        `;
        document.head.appendChild(style);
    }
    let banner = document.getElementById('dorkscan-attention-banner');
    if (!banner) {
        banner = document.createElement('div');
        banner.id = 'dorkscan-attention-banner';
        document.body.prepend(banner);
    }
    banner.innerText = message;
    window.scrollTo(0, 0);
    return true;
}
"""

REMOVE_ATTENTION_BANNER = """
() => {
    for (const id of ['dorkscan-attention-style', 'dorkscan-attention-banner']) {
        const node = document.getElementById(id);
        if (node) {
            node.remove();
        }
    }
    return true;
}
"""

# arg: CSS selector of the consent button
CLICK_IF_PRESENT = """
(selector) => {
    const node = document.querySelector(selector);
    if (!node) {
        return false;
    }
    node.click();
    return true;
}
"""

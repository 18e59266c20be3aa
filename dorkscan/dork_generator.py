"""
Dork Generator Module

Builds the ordered list of search queries (dorks) for a target domain:
- Generic exposures (credentials, backups, logs, admin panels)
- Product CMS probes (Adobe Experience Manager)
- Framework-specific probes (WordPress, Joomla, Drupal, Magento)
- E-commerce and payment pages
- Extra probes for alternate domains and restricted paths

WHY DORKS?
Search engines index far more than companies intend to publish.
A dork narrows the index down to one domain and one kind of mistake:
a leaked .env file, an open directory listing, a forgotten admin panel.
"""
import re

from dorkscan.errors import InvalidDomainError
from dorkscan.utils import learn

CATEGORIES = ('generic', 'product_cms', 'framework_specific', 'ecommerce')

# Menu numbers shown to the operator
CATEGORY_MENU = {
    '1': 'generic',
    '2': 'product_cms',
    '3': 'framework_specific',
    '4': 'ecommerce',
}

# 'productcms', 'product-cms' and 'product_cms' all name the same category
_CATEGORY_NAMES = {c.replace('_', ''): c for c in CATEGORIES}

_LABEL = r'(?!-)[a-z0-9-]{1,63}(?<!-)'
_DOMAIN_RE = re.compile(rf'^{_LABEL}(\.{_LABEL})+$')


def validate_domain(domain: str) -> str:
    """Normalize and validate a bare hostname such as 'example.com'."""
    if not isinstance(domain, str) or not domain.strip():
        raise InvalidDomainError("Target domain is empty")
    normalized = domain.strip().lower().rstrip('.')
    if len(normalized) > 253 or not _DOMAIN_RE.match(normalized):
        raise InvalidDomainError(f"Invalid target domain: {domain!r}")
    return normalized


def parse_category_selection(answer: str) -> list:
    """Turn a menu answer like '1,3' or '5' into ordered category keys."""
    answer = (answer or '').strip().lower()
    if '5' in answer or answer == 'all':
        return list(CATEGORIES)

    selected = []
    for part in answer.split(','):
        part = part.strip()
        category = CATEGORY_MENU.get(part) or _CATEGORY_NAMES.get(re.sub(r'[-_]', '', part))
        if category and category not in selected:
            selected.append(category)
    return selected or ['generic']


class DorkGenerator:
    def __init__(self, config: dict, learn_mode: bool = False):
        self.config = config
        self.learn_mode = learn_mode
        self.domain_config = config.get('domain', {})

        # {target} is replaced with the domain
        self.dorks = {
            'generic': [
                # Credentials and keys
                'site:{target} filetype:env OR filetype:yml password',
                'site:{target} filetype:xml password',
                'site:{target} filetype:log username password',
                'site:{target} filetype:ini password OR key OR secret',
                'site:{target} filetype:config password',
                'site:{target} intext:"API_KEY" OR intext:"apikey" OR intext:"api_key"',
                'site:{target} intext:"SECRET_KEY" OR intext:"client_secret"',
                'site:{target} "authorization: Bearer"',
                'site:{target} "access_token"',
                'site:{target} intext:"aws_access_key_id" filetype:txt OR filetype:log',
                'site:{target} intext:"jdbc:mysql:" -github',
                'site:{target} "password" filetype:txt OR filetype:sql OR filetype:ini',

                # Exposed files
                'site:{target} intitle:"Index of" "parent directory"',
                'site:{target} intitle:"Index of" wp-admin',
                'site:{target} inurl:"/wp-content/uploads/"',
                'site:{target} intitle:"Index of" inurl:backup OR inurl:old OR inurl:bkp',
                'site:{target} filetype:bak OR filetype:backup OR filetype:sql',
                'site:{target} filetype:sql "INSERT INTO" -"SQL dump"',
                'site:{target} filetype:sql intext:password',
                'site:{target} filetype:log',
                'site:{target} intext:"<!ENTITY % xx SYSTEM xx;"',
                'site:{target} intext:"syntax error" filetype:sql',
                'site:{target} filetype:json "api" OR "key" OR "token"',

                # Web servers
                'site:{target} filetype:conf "location ~"',
                'site:{target} intitle:"Apache HTTP Server" intitle:"documentation"',
                'site:{target} intext:"Apache Tomcat/" "error report"',
                'site:{target} intext:"nginx error log"',
                'site:{target} intitle:"Welcome to nginx!" intext:"Welcome to nginx"',
                'site:{target} intitle:"403 Forbidden" intext:"nginx"',

                # Admin and debug panels
                'site:{target} inurl:login OR inurl:admin OR inurl:backend',
                'site:{target} inurl:"/phpinfo.php" OR inurl:".php?mode=phpinfo"',
                'site:{target} inurl:"/phpmyadmin/" OR inurl:"/adminer.php"',
                'site:{target} inurl:"/wp-login.php" OR inurl:"/administrator/"',
                'site:{target} inurl:"/server-status" OR inurl:"/server-info"',

                # Application endpoints
                'site:{target} inurl:"/wp-json/wp/v2/users"',
                'site:{target} inurl:"/api/swagger" OR inurl:"/swagger-ui.html"',
                'site:{target} inurl:"/api/v1" OR inurl:"/api/v2"',
                'site:{target} inurl:"/.git" "Index of /.git"',
                'site:{target} inurl:"/actuator/health" OR inurl:"/actuator/env"',
                'site:{target} inurl:"/.env" OR inurl:"/config.js"',
                'site:{target} inurl:"/.well-known/"',
                'site:{target} "error occured at line" OR "syntax error"',
                'site:{target} "Warning:" "database" "on line"',
                'site:{target} "ERROR: The requested URL could not be retrieved"',

                # External code and paste sites
                'site:github.com {target}',
                'site:gitlab.com {target}',
                'site:bitbucket.org {target}',
                'site:pastebin.com {target}',
                'site:jsfiddle.net {target}',
                'site:codepen.io {target}',
                'site:trello.com {target}',

                # Subdomains and staging environments
                'site:*.{target} inurl:test OR inurl:dev OR inurl:stage OR inurl:beta',
                'site:*.{target} inurl:uat OR inurl:qa OR inurl:staging',
                'site:test.{target} OR site:dev.{target} OR site:stage.{target} OR site:stg.{target}',
                'site:*.{target} -www intext:admin OR intext:login',

                # Cloud storage and CDNs
                'site:s3.amazonaws.com {target}',
                'site:blob.core.windows.net {target}',
                'site:storage.googleapis.com {target}',
                'site:cloudfront.net {target}',
                'site:digitaloceanspaces.com {target}',

                # Misc
                'site:{target} inurl:"server-status" OR inurl:"status.php"',
                'site:{target} intext:"Fatal error: Call to undefined function"',
                'site:{target} inurl:"?page=" OR inurl:"?file=" OR inurl:"?id="',
                'site:{target} inurl:"?php=" OR inurl:"?lang="',
                'site:{target} ext:json OR ext:xml OR ext:conf OR ext:cnf OR ext:reg OR ext:inf '
                'OR ext:rdp OR ext:cfg OR ext:txt OR ext:ora OR ext:ini',
            ],
            'product_cms': [
                'site:{target} inurl:crx',
                'site:{target} inurl:bin/querybuilder.json',
                'site:{target} inurl:.infinity.json',
                'site:{target} inurl:.1.json',
                'site:{target} inurl:.tidy.json',
                'site:{target} inurl:.model.json',
                'site:{target} inurl:/libs/granite/security/currentuser.json',
                'site:{target} inurl:/system/console',
                'site:{target} inurl:/crx/de/index.jsp',
                'site:{target} inurl:/crx/explorer',
                'site:{target} inurl:/etc/replication',
                'site:{target} inurl:/etc/dam',
                'site:{target} inurl:/system/sling/cqform',
                'site:{target} inurl:/apps/',
                'site:{target} inurl:/content/dam',
                'site:{target} inurl:felix/bundles',
                'site:{target} inurl:etc/clientlibs',
                'site:{target} inurl:system/console/configMgr',
                'site:{target} inurl:.servlet.json',
                'site:{target} inurl:.servlet.html',
            ],
            'framework_specific': [
                # WordPress
                'site:{target} inurl:wp-content',
                'site:{target} inurl:wp-includes',
                'site:{target} inurl:wp-admin',
                'site:{target} inurl:wp-config.php',
                'site:{target} inurl:wp-json/wp/v2/users',
                'site:{target} inurl:xmlrpc.php',
                # Joomla
                'site:{target} inurl:index.php?option=com_',
                'site:{target} inurl:/administrator/index.php',
                'site:{target} intext:"Joomla! Debug Console"',
                'site:{target} inurl:com_users',
                # Drupal
                'site:{target} inurl:/?q=user/',
                'site:{target} inurl:/?q=admin/',
                'site:{target} intext:"Powered by Drupal" inurl:user',
                'site:{target} inurl:/sites/default/files/',
                # Magento
                'site:{target} inurl:/app/etc/local.xml',
                'site:{target} inurl:/downloader/',
                'site:{target} intext:"Mage.Cookies.path"',
                # Other CMS
                'site:{target} inurl:"/administrator/"',
                'site:{target} inurl:"/admin/" OR inurl:"/cp/" OR inurl:"/backend/"',
            ],
            'ecommerce': [
                'site:{target} inurl:/checkout/ OR inurl:/cart/ OR inurl:/basket/',
                'site:{target} inurl:/order OR inurl:/payment OR inurl:/transaction',
                'site:{target} intext:"credit card" OR intext:"card number"',
                'site:{target} inurl:checkout.php OR inurl:checkout.asp OR inurl:checkout.jsp',
                'site:{target} intext:"cvv" OR intext:"cvc" inurl:payment',
                'site:{target} intext:"payment gateway" OR intext:"gateway id"',
                'site:{target} intext:"CHECKOUT_SESSION_ID"',
                'site:{target} filetype:log intext:payment',
            ],
        }

        # Probes added for every alternate domain
        self.alternate_templates = [
            'site:{target}',
            'site:{target} inurl:admin',
            'site:{target} filetype:log',
        ]

    def category_dorks(self, category: str, domain: str) -> list:
        """Dorks of a single category, in template order."""
        if category not in self.dorks:
            raise ValueError(f"Unknown dork category: {category!r}")
        return [t.replace('{target}', domain) for t in self.dorks[category]]

    def alternate_domain_dorks(self) -> list:
        if not self.domain_config.get('include_variations', False):
            return []
        dorks = []
        for alt in self.domain_config.get('alternative_domains') or []:
            alt = validate_domain(alt)
            dorks.extend(t.replace('{target}', alt) for t in self.alternate_templates)
        return dorks

    def path_dorks(self, domain: str) -> list:
        if not self.domain_config.get('limit_paths', False):
            return []
        return [f"site:{domain} inurl:{path}" for path in self.domain_config.get('paths') or []]

    def generate(self, domain: str, categories) -> list:
        """Ordered, duplicate-free dorks for domain and the selected categories."""
        domain = validate_domain(domain)

        dorks = []
        for category in dict.fromkeys(categories):
            dorks.extend(self.category_dorks(category, domain))
        dorks.extend(self.alternate_domain_dorks())
        dorks.extend(self.path_dorks(domain))

        return list(dict.fromkeys(dorks))

    def describe(self):
        learn("Search Engine Dorks",
              "Each dork pins a search to one domain and asks for a specific kind of leak:\n"
              "• filetype:/ext: finds logs, dumps and config files\n"
              "• inurl: finds admin panels and framework endpoints\n"
              "• intitle:\"Index of\" finds open directory listings\n\n"
              "Engines rate-limit these queries quickly, so each dork goes to a random engine "
              "and anything that looks like a CAPTCHA is handed to you to solve.",
              self.learn_mode)

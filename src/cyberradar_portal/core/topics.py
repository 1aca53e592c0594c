from collections.abc import Iterable
from dataclasses import dataclass

from cyberradar_portal.domain import Alert

GENERAL_TOPIC = "general"
M365_ALERT_TYPE_PREFIX = "m365-"
BREACH_ALERT_TYPE = "breach"


@dataclass(frozen=True, slots=True)
class Topic:
    id: str
    label: str
    icon: str
    keywords: tuple[str, ...]


TOPICS: tuple[Topic, ...] = (
    Topic(
        id="microsoft",
        label="Microsoft & Cloud",
        icon="☁️",
        keywords=(
            "microsoft", "windows", "azure", "office", "edge", "exchange", "entra",
            "365", "teams", "copilot", "sharepoint", "outlook", "defender",
            "onedrive", "intune", "power platform", "dynamics", "m365",
            "message center", "service health", "roadmap",
        ),
    ),
    Topic(
        id="linux",
        label="Linux & Server",
        icon="🐧",
        keywords=(
            "linux", "kernel", "red hat", "rhel", "ubuntu", "suse", "debian",
            "fedora", "rocky", "centos", "amazon linux", "gentoo",
        ),
    ),
    Topic(
        id="network",
        label="Network & Firewall",
        icon="🔒",
        keywords=(
            "cisco", "fortinet", "fortigate", "fortios", "palo alto", "juniper",
            "zyxel", "firewall", "router", "switch", "sophos", "checkpoint", "aruba",
        ),
    ),
    Topic(
        id="ics",
        label="ICS / OT",
        icon="🏭",
        keywords=(
            "siemens", "simatic", "sinec", "rockwell", "schneider", "abb", "ics",
            "scada", "plc", "industrial", "mitsubishi", "festo", "hmi", "dcs",
        ),
    ),
    Topic(
        id="web",
        label="Web & Application",
        icon="🌐",
        keywords=(
            "chrome", "firefox", "safari", "browser", "wordpress", "drupal",
            "apache", "tomcat", "nginx", "php", "node", "react", "xss",
            "sql injection",
        ),
    ),
    Topic(
        id="enterprise",
        label="Enterprise & Database",
        icon="🗄️",
        keywords=(
            "sap", "oracle", "ibm", "db2", "mysql", "postgresql", "sql server",
            "mongodb", "redis", "elasticsearch", "qradar", "guardium", "cognos",
        ),
    ),
    Topic(
        id="infra",
        label="Virtualization & Infra",
        icon="🖥️",
        keywords=(
            "vmware", "esxi", "vcenter", "docker", "kubernetes", "container",
            "citrix", "ivanti", "proxmox", "hyper-v", "nutanix", "terraform",
        ),
    ),
    Topic(
        id="devops",
        label="DevOps & CI/CD",
        icon="⚙️",
        keywords=(
            "gitlab", "jenkins", "github", "ci/cd", "devops", "npm", "pypi",
            "maven", "artifactory", "sonarqube", "ansible", "puppet",
        ),
    ),
    Topic(
        id="identity",
        label="Identity & Access",
        icon="🔑",
        keywords=(
            "phishing", "credential", "identity", "auth", "mfa", "sso", "password",
            "login", "oauth", "saml", "active directory", "ldap", "kerberos",
        ),
    ),
    Topic(
        id="malware",
        label="Malware & Ransomware",
        icon="🦠",
        keywords=(
            "ransomware", "malware", "trojan", "botnet", "backdoor", "wiper", "rat",
            "infostealer", "cryptominer", "rootkit", "loader",
        ),
    ),
    Topic(
        id="apt",
        label="APT & Threat Actors",
        icon="🎯",
        keywords=(
            "apt", "nation-state", "espionage", "campaign", "threat actor",
            "hacking group", "lazarus", "cozy bear", "fancy bear", "sandworm",
        ),
    ),
    Topic(
        id="breach",
        label="Data Leak & Breach",
        icon="💧",
        keywords=(
            "breach", "data leak", "datenleck", "data exposure", "credential dump",
            "leaked",
        ),
    ),
)

TOPIC_IDS: tuple[str, ...] = tuple(topic.id for topic in TOPICS)


def categorize_alert(
    title: str | None,
    affected_products: Iterable[str] = (),
    affected_vendors: Iterable[str] = (),
    alert_type: str | None = None,
    source_name: str | None = None,
) -> tuple[str, ...]:
    """Tag an alert with every topic whose keywords occur in its text.

    Topics are not exclusive. Falls back to ``("general",)`` when nothing
    matched.
    """
    haystack = " ".join(
        [title or "", *affected_products, *affected_vendors, source_name or ""]
    ).lower()

    matched = [
        topic.id
        for topic in TOPICS
        if any(keyword in haystack for keyword in topic.keywords)
    ]

    if alert_type and alert_type.startswith(M365_ALERT_TYPE_PREFIX) and "microsoft" not in matched:
        matched.append("microsoft")
    if alert_type == BREACH_ALERT_TYPE and "breach" not in matched:
        matched.append("breach")

    return tuple(matched) if matched else (GENERAL_TOPIC,)


def topics_for(alert: Alert) -> tuple[str, ...]:
    return categorize_alert(
        title=alert.display_title,
        affected_products=alert.affected_products,
        affected_vendors=alert.affected_vendors,
        alert_type=alert.alert_type,
        source_name=alert.source_name,
    )

#!/usr/bin/env python3
"""
Firewall + Fail2Ban + auditd Bootstrap
--------------------------------------

A one-shot hardening tool for Debian and Ubuntu hosts. It installs UFW,
Fail2Ban and auditd, applies a safe default firewall rule set, writes an SSH
jail override and a sudoers audit rule file, and reports the resulting status
of all three subsystems with a Nord-themed interface.

The flow is strictly linear with two confirmation gates:
  1. Proceed with the bootstrap at all.
  2. Enable the firewall now (rules are always defined first).

Usage:
  sudo firewall-fail2ban-setup
  sudo firewall-fail2ban-setup --ssh-port 2222 --admin-cidr 203.0.113.5/32 --yes

Note: Run this script with root privileges.

Version: 1.0.0
"""

# ----------------------------------------------------------------
# Dependencies and Imports
# ----------------------------------------------------------------
import ipaddress
import logging
import os
import re
import shutil
import signal
import subprocess
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

import click
import pyfiglet
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table
from rich.text import Text
from rich.theme import Theme


# ----------------------------------------------------------------
# Nord-Themed Colors and Theme Setup
# ----------------------------------------------------------------
class NordColors:
    """Nord color palette definitions for consistent UI styling."""

    POLAR_NIGHT_3: str = "#434C5E"
    SNOW_STORM_1: str = "#D8DEE9"
    SNOW_STORM_2: str = "#E5E9F0"
    FROST_1: str = "#8FBCBB"
    FROST_2: str = "#88C0D0"
    FROST_3: str = "#81A1C1"
    FROST_4: str = "#5E81AC"
    RED: str = "#BF616A"
    YELLOW: str = "#EBCB8B"
    GREEN: str = "#A3BE8C"

    @classmethod
    def get_frost_gradient(cls, steps: int = 4) -> List[str]:
        """Returns a gradient using the frost color palette."""
        frosts = [cls.FROST_1, cls.FROST_2, cls.FROST_3, cls.FROST_4]
        return frosts[:steps]


nord_theme = Theme(
    {
        "banner": f"bold {NordColors.FROST_2}",
        "header": f"bold {NordColors.FROST_2}",
        "info": NordColors.GREEN,
        "warning": NordColors.YELLOW,
        "error": NordColors.RED,
        "debug": NordColors.POLAR_NIGHT_3,
        "success": NordColors.GREEN,
    }
)

console = Console(theme=nord_theme)


# ----------------------------------------------------------------
# Global Configuration
# ----------------------------------------------------------------
APP_NAME: str = "Firewall Bootstrap"
APP_SUBTITLE: str = "UFW + Fail2Ban + auditd"
VERSION: str = "1.0.0"
LOGGER_NAME: str = "firewall_fail2ban_setup"
DEFAULT_SSH_PORT: int = 22

# Failures a best-effort step absorbs
COMMAND_ERRORS = (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError)

JAIL_TEMPLATE: str = (
    "[JAIL_NAME_PLACEHOLDER]\n"
    "enabled = true\n"
    "port = SSH_PORT_PLACEHOLDER\n"
    "filter = FILTER_PLACEHOLDER\n"
    "logpath = LOGPATH_PLACEHOLDER\n"
    "maxretry = MAXRETRY_PLACEHOLDER\n"
    "bantime = BANTIME_PLACEHOLDER\n"
    "findtime = FINDTIME_PLACEHOLDER\n"
)

AUDIT_RULES: str = (
    "-w /etc/sudoers -p wa -k sudoers_changes\n"
    "-w /etc/sudoers.d -p wa -k sudoers_d_changes\n"
)


# ----------------------------------------------------------------
# Data Structures
# ----------------------------------------------------------------
@dataclass
class Config:
    """Fixed paths and policy constants for the bootstrap."""

    LOG_FILE: str = "/var/log/firewall_fail2ban_setup.log"
    JAIL_FILE: str = "/etc/fail2ban/jail.d/99-ufw-ssh.local"
    AUDIT_RULES_FILE: str = "/etc/audit/rules.d/99-sudoers.rules"
    PACKAGES: List[str] = field(
        default_factory=lambda: ["ufw", "fail2ban", "auditd"]
    )

    # Fail2Ban policy
    JAIL_NAME: str = "sshd"
    JAIL_FILTER: str = "sshd"
    JAIL_LOGPATH: str = "/var/log/auth.log"
    MAXRETRY: int = 5
    BANTIME: int = 3600
    FINDTIME: int = 600
    IGNORE_LOCAL: str = "127.0.0.1/8"

    # Give a freshly restarted fail2ban time to load its jails
    SETTLE_SECONDS: float = 1.0


@dataclass(frozen=True)
class BootstrapParameters:
    """
    Values collected from the operator before anything touches the system.

    Attributes:
        ssh_port: Validated TCP port of the SSH daemon.
        admin_cidr: Normalised admin network, or None for open SSH.
        enable_firewall: True/False when decided up front, None to ask.
    """

    ssh_port: int = DEFAULT_SSH_PORT
    admin_cidr: Optional[str] = None
    enable_firewall: Optional[bool] = None


class InputValidationError(ValueError):
    """Raised when an operator-supplied value cannot be used safely."""

    def __init__(self, field_name: str, value: str, reason: str) -> None:
        self.field_name = field_name
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field_name} {value!r}: {reason}")


# ----------------------------------------------------------------
# UI Helper Functions
# ----------------------------------------------------------------
def create_header(title: str = APP_NAME) -> Panel:
    """
    Generate an ASCII art header with dynamic gradient styling using Pyfiglet.
    The banner is built line-by-line into a Rich Text object to avoid stray markup tokens.
    """
    term_width, _ = shutil.get_terminal_size((80, 24))
    fonts: List[str] = ["slant", "small", "mini"]
    if term_width < 60:
        fonts = fonts[1:]

    ascii_art = ""
    for font in fonts:
        try:
            fig = pyfiglet.Figlet(font=font, width=min(term_width - 10, 120))
            ascii_art = fig.renderText(title)
            if ascii_art.strip():
                break
        except Exception:
            continue
    if not ascii_art.strip():
        ascii_art = f"  {title}  "

    ascii_lines = [line for line in ascii_art.splitlines() if line.strip()]
    colors = NordColors.get_frost_gradient(len(ascii_lines))
    combined_text = Text()
    for i, line in enumerate(ascii_lines):
        color = colors[i % len(colors)]
        combined_text.append(Text(line, style=f"bold {color}"))
        if i < len(ascii_lines) - 1:
            combined_text.append("\n")

    return Panel(
        combined_text,
        border_style=NordColors.FROST_1,
        padding=(1, 2),
        title=Text(f"v{VERSION}", style=f"bold {NordColors.SNOW_STORM_2}"),
        title_align="right",
        subtitle=Text(APP_SUBTITLE, style=f"bold {NordColors.SNOW_STORM_1}"),
        subtitle_align="center",
        box=box.ROUNDED,
    )


def print_message(
    text: str, style: str = NordColors.FROST_2, prefix: str = "•"
) -> None:
    """Print a styled message with a prefix."""
    console.print(f"[{style}]{prefix} {escape(text)}[/{style}]")


def print_success(message: str) -> None:
    """Print a success message."""
    print_message(message, NordColors.GREEN, "✓")


def print_warning(message: str) -> None:
    """Print a warning message."""
    print_message(message, NordColors.YELLOW, "⚠")


def print_error(message: str) -> None:
    """Print an error message."""
    print_message(message, NordColors.RED, "✗")


def print_step(message: str) -> None:
    """Print a step message in a workflow."""
    print_message(message, NordColors.FROST_2, "→")


def print_section(title: str) -> None:
    """Print a section header."""
    console.print()
    console.print(f"[bold {NordColors.FROST_3}]{title}[/]")
    console.print(f"[{NordColors.FROST_3}]{'─' * len(title)}[/]")


def display_panel(
    message: str, style: str = NordColors.FROST_2, title: Optional[str] = None
) -> None:
    """Display command output in a panel without interpreting it as markup."""
    panel = Panel(
        Text(message),
        border_style=style,
        padding=(1, 2),
        title=Text(title, style=f"bold {style}") if title else None,
        box=box.ROUNDED,
    )
    console.print(panel)


def print_status_report(status: Dict[str, Dict[str, str]]) -> None:
    """Print a status report table for all bootstrap phases."""
    table = Table(title="Bootstrap Status Report", box=box.ROUNDED)
    table.add_column("Task", style="header")
    table.add_column("Status")
    table.add_column("Message", style="info")

    for key, data in status.items():
        status_color = {
            "pending": "debug",
            "skipped": "debug",
            "warning": "warning",
            "success": "success",
            "failed": "error",
        }.get(data["status"].lower(), "info")

        table.add_row(
            key.replace("_", " ").title(),
            f"[{status_color}]{data['status'].upper()}[/{status_color}]",
            escape(data["message"]),
        )

    console.print(table)


# ----------------------------------------------------------------
# Logger Setup
# ----------------------------------------------------------------
def setup_logger(log_file: Union[str, Path], debug: bool = False) -> logging.Logger:
    """
    Set up the bootstrap logger.

    Console output goes through a RichHandler on the shared console. The log
    file receives everything at DEBUG; if it cannot be opened the run carries
    on with console logging only.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    for h in logger.handlers[:]:
        logger.removeHandler(h)
        h.close()

    console_handler = RichHandler(console=console, rich_tracebacks=True)
    console_handler.setLevel(logging.DEBUG if debug else logging.INFO)
    logger.addHandler(console_handler)

    log_file = Path(log_file)
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
    except OSError as e:
        print_warning(f"Could not open log file {log_file}: {e}")
        return logger

    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] [%(levelname)s] %(message)s", "%Y-%m-%d %H:%M:%S"
        )
    )
    logger.addHandler(file_handler)

    try:
        os.chmod(str(log_file), 0o600)
    except OSError as e:
        logger.warning(f"Could not set permissions on log file {log_file}: {e}")

    return logger


# ----------------------------------------------------------------
# Command Execution Utilities
# ----------------------------------------------------------------
def run_command(
    cmd: List[str],
    check: bool = True,
    capture_output: bool = False,
    env: Optional[Dict[str, str]] = None,
    timeout: Optional[int] = None,
) -> subprocess.CompletedProcess:
    """
    Run a system command without a shell.

    Raises:
        subprocess.CalledProcessError: The command exited non-zero and check is set.
        subprocess.TimeoutExpired: A timeout was given and the command ran longer.
        FileNotFoundError: The executable is not installed.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.debug(f"Running command: {' '.join(cmd)}")
    return subprocess.run(
        cmd,
        check=check,
        capture_output=capture_output,
        text=True,
        env=env,
        timeout=timeout,
    )


def describe_error(error: BaseException) -> str:
    """Return a one-line, human readable description of a command failure."""
    if isinstance(error, subprocess.CalledProcessError):
        cmd = error.cmd if isinstance(error.cmd, str) else " ".join(error.cmd)
        detail = (error.stderr or "").strip() if isinstance(error.stderr, str) else ""
        message = f"'{cmd}' exited with status {error.returncode}"
        return f"{message}: {detail}" if detail else message
    if isinstance(error, subprocess.TimeoutExpired):
        cmd = error.cmd if isinstance(error.cmd, str) else " ".join(error.cmd)
        return f"'{cmd}' timed out after {error.timeout} seconds"
    if isinstance(error, FileNotFoundError) and error.filename:
        return f"command not found: {error.filename}"
    return str(error)


# ----------------------------------------------------------------
# Input Validation
# ----------------------------------------------------------------
def parse_ssh_port(value: Optional[str]) -> int:
    """
    Parse the SSH port answer.

    Empty input selects the default port 22. Anything that is not a plain
    decimal number in 1..65535 raises InputValidationError.
    """
    text = (value or "").strip()
    if not text:
        return DEFAULT_SSH_PORT
    if not re.fullmatch(r"[0-9]+", text):
        raise InputValidationError("SSH port", text, "must be a number")
    port = int(text)
    if not 1 <= port <= 65535:
        raise InputValidationError("SSH port", text, "must be between 1 and 65535")
    return port


def parse_admin_cidr(value: Optional[str]) -> Optional[str]:
    """
    Parse the admin network answer into its canonical CIDR form.

    A bare address becomes a single-host network (/32 or /128). Networks
    with host bits set are rejected rather than silently widened.
    """
    text = (value or "").strip()
    if not text:
        return None
    try:
        network = ipaddress.ip_network(text, strict=True)
    except ValueError as e:
        raise InputValidationError("admin CIDR", text, str(e)) from e
    return network.with_prefixlen


# ----------------------------------------------------------------
# Interactive Prompts
# ----------------------------------------------------------------
def confirm(question: str) -> bool:
    """Ask a yes/no question; only 'y' or 'yes' (any case) counts as yes."""
    answer = Prompt.ask(
        Text(f"{question} [y/N]"), console=console, default="", show_default=False
    )
    return answer.strip().lower() in ("y", "yes")


def ask(question: str) -> str:
    """Ask a free-text question; an empty answer is returned as ''."""
    return Prompt.ask(Text(question), console=console, default="", show_default=False)


def collect_parameters(
    ssh_port: Optional[str] = None,
    admin_cidr: Optional[str] = None,
    enable_firewall: Optional[bool] = None,
    interactive: bool = True,
) -> BootstrapParameters:
    """
    Gather and validate SSH port and admin CIDR.

    Values passed in (from command line options) are used as-is and never
    prompted for. In non-interactive mode every missing value takes its
    default and the firewall stays disabled unless explicitly requested.

    Raises:
        InputValidationError: A value is not a valid port or network.
    """
    if ssh_port is None and interactive:
        ssh_port = ask("Enter your SSH TCP port (example: 2222)")
    if not (ssh_port or "").strip():
        print_message(f"No port entered. Using default {DEFAULT_SSH_PORT}")
    port = parse_ssh_port(ssh_port)

    if admin_cidr is None and interactive:
        if confirm("Do you want to restrict SSH to a single admin IP? (recommended)"):
            admin_cidr = ask("Enter admin IP in CIDR format (example 203.0.113.5/32)")
    cidr = parse_admin_cidr(admin_cidr)

    if enable_firewall is None and not interactive:
        enable_firewall = False

    return BootstrapParameters(
        ssh_port=port, admin_cidr=cidr, enable_firewall=enable_firewall
    )


# ----------------------------------------------------------------
# Rule and Config Rendering
# ----------------------------------------------------------------
def build_ufw_rules(ssh_port: int, admin_cidr: Optional[str] = None) -> List[List[str]]:
    """
    Return the ordered UFW commands for the base policy.

    Defaults come first, then loopback, SSH, web ports and finally the SSH
    rate limit. All of them must exist before the firewall is enabled.
    """
    if admin_cidr:
        ssh_rule = [
            "ufw", "allow", "from", admin_cidr,
            "to", "any", "port", str(ssh_port), "proto", "tcp",
        ]
    else:
        ssh_rule = ["ufw", "allow", f"{ssh_port}/tcp"]

    return [
        ["ufw", "default", "allow", "outgoing"],
        ["ufw", "default", "deny", "incoming"],
        ["ufw", "allow", "in", "on", "lo"],
        ssh_rule,
        ["ufw", "allow", "80/tcp"],
        ["ufw", "allow", "443/tcp"],
        ["ufw", "limit", f"{ssh_port}/tcp"],
    ]


def render_jail_config(
    ssh_port: int, admin_cidr: Optional[str] = None, config: Optional[Config] = None
) -> str:
    """Render the SSH jail override, adding an ignore list right after the header."""
    config = config or Config()
    rendered = (
        JAIL_TEMPLATE.replace("JAIL_NAME_PLACEHOLDER", config.JAIL_NAME)
        .replace("SSH_PORT_PLACEHOLDER", str(ssh_port))
        .replace("FILTER_PLACEHOLDER", config.JAIL_FILTER)
        .replace("LOGPATH_PLACEHOLDER", config.JAIL_LOGPATH)
        .replace("MAXRETRY_PLACEHOLDER", str(config.MAXRETRY))
        .replace("BANTIME_PLACEHOLDER", str(config.BANTIME))
        .replace("FINDTIME_PLACEHOLDER", str(config.FINDTIME))
    )
    if not admin_cidr:
        return rendered

    lines = rendered.splitlines(keepends=True)
    header_index = lines.index(f"[{config.JAIL_NAME}]\n")
    lines.insert(header_index + 1, f"ignoreip = {config.IGNORE_LOCAL} {admin_cidr}\n")
    return "".join(lines)


def write_config_file(path: Union[str, Path], content: str) -> Path:
    """Write a config file, creating its parent directory when missing."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


# ----------------------------------------------------------------
# Main Bootstrap Class
# ----------------------------------------------------------------
class FirewallBootstrap:
    """Runs the bootstrap phases in order and tracks their status."""

    def __init__(
        self,
        params: BootstrapParameters,
        config: Optional[Config] = None,
        runner: Optional[Callable[..., subprocess.CompletedProcess]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.params = params
        self.config = config or Config()
        self.runner = runner if runner is not None else run_command
        self.logger = logger or logging.getLogger(LOGGER_NAME)
        self.firewall_enabled = False
        self.status: Dict[str, Dict[str, str]] = {
            key: {"status": "pending", "message": ""}
            for key in ("packages", "firewall", "firewall_enable", "fail2ban", "auditd")
        }

    def _set_status(self, key: str, status: str, message: str = "") -> None:
        self.status[key] = {"status": status, "message": message}

    def _show_status(self, cmd: List[str], title: str, fallback: str) -> Optional[str]:
        """Run an informational query and show its output; failures only warn."""
        try:
            result = self.runner(cmd, capture_output=True)
        except COMMAND_ERRORS as e:
            self.logger.debug(f"Status query failed: {describe_error(e)}")
            print_warning(fallback)
            return None
        output = (result.stdout or "").strip()
        display_panel(output or "(no output)", title=title)
        return output

    # ----------------------------------------------------------------
    # Phase 1: Packages
    # ----------------------------------------------------------------
    def phase_install_packages(self) -> bool:
        """Refresh the package index and install the required packages."""
        print_section("Package Installation")
        packages = self.config.PACKAGES
        env = dict(os.environ, DEBIAN_FRONTEND="noninteractive")
        try:
            print_step("Updating package index...")
            self.runner(["apt-get", "update", "-y"], env=env)
            print_step(f"Installing {', '.join(packages)}...")
            self.runner(["apt-get", "install", "-y", *packages], env=env)
        except COMMAND_ERRORS as e:
            self.logger.error(f"Package installation failed: {describe_error(e)}")
            self._set_status("packages", "failed", describe_error(e))
            return False

        self.logger.info(f"Installed packages: {', '.join(packages)}")
        self._set_status("packages", "success", ", ".join(packages))
        return True

    # ----------------------------------------------------------------
    # Phase 2: Firewall
    # ----------------------------------------------------------------
    def phase_firewall(self) -> bool:
        """Apply the ordered UFW rule set, then offer to enable the firewall."""
        print_section("Firewall Rules")
        port = self.params.ssh_port
        cidr = self.params.admin_cidr
        if cidr:
            print_step(f"Allowing SSH port {port} only from {cidr}")
        else:
            print_step(f"Allowing SSH port {port} from any IP (less secure)")

        failed: List[str] = []
        for rule in build_ufw_rules(port, cidr):
            try:
                self.runner(rule)
            except COMMAND_ERRORS as e:
                self.logger.error(f"Firewall rule failed: {describe_error(e)}")
                failed.append(" ".join(rule[1:]))

        if failed:
            self._set_status("firewall", "warning", f"{len(failed)} rule(s) failed")
        else:
            self._set_status("firewall", "success", "All rules defined")

        console.print("Planned UFW rules:")
        self._show_status(
            ["ufw", "status", "numbered"], "UFW Rules", "UFW status unavailable"
        )

        self.enable_firewall()
        return not failed

    def enable_firewall(self) -> bool:
        """Enable UFW if the operator agrees (or decided up front)."""
        decision = self.params.enable_firewall
        if decision is None:
            decision = confirm(
                "Enable UFW now? (ensure you have console access or allowed SSH rule)"
            )
        if not decision:
            print_warning("UFW not enabled. You can enable later with 'sudo ufw enable'")
            self._set_status("firewall_enable", "skipped", "Left disabled")
            return False

        try:
            self.runner(["ufw", "--force", "enable"])
        except COMMAND_ERRORS as e:
            self.logger.error(f"Enabling UFW failed: {describe_error(e)}")
            self._set_status("firewall_enable", "failed", describe_error(e))
            return False

        self.firewall_enabled = True
        print_success("UFW enabled")
        self._set_status("firewall_enable", "success", "UFW enabled")
        return True

    # ----------------------------------------------------------------
    # Phase 3: Fail2Ban
    # ----------------------------------------------------------------
    def phase_fail2ban(self) -> bool:
        """Write the SSH jail override, restart Fail2Ban and show the jail."""
        print_section("Fail2Ban")
        content = render_jail_config(
            self.params.ssh_port, self.params.admin_cidr, self.config
        )
        try:
            path = write_config_file(self.config.JAIL_FILE, content)
        except OSError as e:
            self.logger.error(f"Could not write {self.config.JAIL_FILE}: {e}")
            self._set_status("fail2ban", "failed", f"Jail file not written: {e}")
            return False
        self.logger.info(f"Fail2Ban jail written to {path}")

        failed: List[str] = []
        for cmd in (["systemctl", "enable", "fail2ban"], ["systemctl", "restart", "fail2ban"]):
            try:
                self.runner(cmd)
            except COMMAND_ERRORS as e:
                self.logger.error(f"Fail2Ban service step failed: {describe_error(e)}")
                failed.append(cmd[1])

        time.sleep(self.config.SETTLE_SECONDS)
        jail = self.config.JAIL_NAME
        output = self._show_status(
            ["fail2ban-client", "status", jail],
            f"Fail2Ban status ({jail})",
            f"fail2ban {jail} status unavailable (check logs)",
        )
        if "restart" in failed:
            self._set_status("fail2ban", "failed", "Jail written, restart failed")
        elif failed:
            self._set_status("fail2ban", "warning", f"systemctl {failed[0]} failed")
        elif output is None:
            self._set_status("fail2ban", "warning", "Restarted, jail status unavailable")
        else:
            self._set_status("fail2ban", "success", f"Jail {jail} active")
        return not failed

    # ----------------------------------------------------------------
    # Phase 4: auditd
    # ----------------------------------------------------------------
    def phase_auditd(self) -> bool:
        """Start auditd, install the sudoers watch rules and reload them."""
        print_section("Audit Rules")
        for cmd in (["systemctl", "enable", "auditd"], ["systemctl", "start", "auditd"]):
            try:
                self.runner(cmd)
            except COMMAND_ERRORS as e:
                self.logger.warning(f"auditd service step failed: {describe_error(e)}")

        try:
            path = write_config_file(self.config.AUDIT_RULES_FILE, AUDIT_RULES)
        except OSError as e:
            self.logger.error(f"Could not write {self.config.AUDIT_RULES_FILE}: {e}")
            self._set_status("auditd", "failed", f"Rules file not written: {e}")
            return False
        self.logger.info(f"Audit rules written to {path}")

        if self.reload_audit_rules():
            self._set_status("auditd", "success", "Sudoers watch rules loaded")
            return True
        self._set_status("auditd", "warning", "Rules written, reload failed")
        return False

    def reload_audit_rules(self) -> bool:
        """Load rules with augenrules, falling back to a service restart."""
        for cmd in (["augenrules", "--load"], ["service", "auditd", "restart"]):
            try:
                self.runner(cmd)
                return True
            except COMMAND_ERRORS as e:
                self.logger.warning(f"Audit reload step failed: {describe_error(e)}")
        print_warning("Audit rules could not be reloaded; they apply after reboot.")
        return False

    # ----------------------------------------------------------------
    # Phase 5: Report
    # ----------------------------------------------------------------
    def phase_report(self) -> None:
        """Print the final state of UFW, Fail2Ban and the audit rules."""
        console.print()
        console.print(create_header("Complete"))
        print_message(f"SSH Port: {self.params.ssh_port}")
        if self.params.admin_cidr:
            print_message(f"SSH restricted to: {self.params.admin_cidr}")

        self._show_status(["ufw", "status", "verbose"], "UFW status", "UFW status unavailable")
        jail = self.config.JAIL_NAME
        self._show_status(
            ["fail2ban-client", "status", jail],
            f"Fail2Ban status ({jail})",
            f"fail2ban {jail} status unavailable",
        )
        self.show_audit_rules()

        print_status_report(self.status)
        console.print()
        print_message(
            "If you enabled UFW and cannot SSH, use the VM console or cloud "
            "provider serial console to fix rules."
        )
        print_message("To remove a ban: sudo fail2ban-client unban <ip>")
        print_success("Done. Stay secure.")

    def show_audit_rules(self) -> List[str]:
        """Show the loaded audit rules that mention sudoers."""
        try:
            result = self.runner(["auditctl", "-l"], capture_output=True)
        except COMMAND_ERRORS as e:
            self.logger.debug(f"auditctl query failed: {describe_error(e)}")
            print_warning("Audit rules unavailable")
            return []
        matches = [
            line for line in (result.stdout or "").splitlines() if "sudoers" in line
        ]
        if matches:
            display_panel("\n".join(matches), title="Audit rules (sudoers)")
        else:
            print_warning("No sudoers audit rules are loaded")
        return matches

    def run(self) -> int:
        """Execute all phases; returns the process exit code."""
        self.logger.info(
            f"Starting bootstrap: ssh_port={self.params.ssh_port} "
            f"admin_cidr={self.params.admin_cidr or 'any'}"
        )
        if not self.phase_install_packages():
            print_error("APT install failed")
            return 1
        self.phase_firewall()
        self.phase_fail2ban()
        self.phase_auditd()
        self.phase_report()
        self.logger.info("Bootstrap complete")
        return 0


# ----------------------------------------------------------------
# Signal Handling
# ----------------------------------------------------------------
def signal_handler(sig, frame) -> None:
    """Gracefully handle termination signals (SIGINT, SIGTERM)."""
    try:
        sig_name = signal.Signals(sig).name
        print_warning(f"Process interrupted by {sig_name}")
    except ValueError:
        print_warning(f"Process interrupted by signal {sig}")
    sys.exit(128 + sig)


def setup_signal_handlers() -> None:
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)


def check_root() -> bool:
    """Return True when running with root privileges."""
    return os.geteuid() == 0


# ----------------------------------------------------------------
# Main CLI Entry Point with Click
# ----------------------------------------------------------------
@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--ssh-port", default=None, help="SSH TCP port (default 22)")
@click.option("--admin-cidr", default=None, help="Restrict SSH to this admin network")
@click.option("-y", "--yes", is_flag=True, help="Skip the initial confirmation")
@click.option(
    "--enable-firewall",
    type=click.Choice(["ask", "yes", "no"]),
    default="ask",
    show_default=True,
    help="Enable UFW once the rules are defined",
)
@click.option(
    "--non-interactive",
    is_flag=True,
    help="Never prompt; missing values take defaults (implies --yes)",
)
@click.option("--log-file", default=None, help="Write the run log to this file")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.version_option(version=VERSION, prog_name=APP_NAME)
def main(
    ssh_port: Optional[str],
    admin_cidr: Optional[str],
    yes: bool,
    enable_firewall: str,
    non_interactive: bool,
    log_file: Optional[str],
    debug: bool,
) -> None:
    """Harden this host with UFW, Fail2Ban and auditd."""
    setup_signal_handlers()
    console.print(create_header())

    if not check_root():
        print_error("This script requires root privileges. Please run with sudo.")
        sys.exit(1)

    if not (yes or non_interactive) and not confirm("Proceed with the bootstrap?"):
        print_error("Aborted by user")
        sys.exit(1)

    try:
        params = collect_parameters(
            ssh_port,
            admin_cidr,
            {"ask": None, "yes": True, "no": False}[enable_firewall],
            interactive=not non_interactive,
        )
    except InputValidationError as e:
        print_error(str(e))
        sys.exit(1)

    config = Config()
    if log_file:
        config.LOG_FILE = log_file
    logger = setup_logger(config.LOG_FILE, debug=debug)

    try:
        code = FirewallBootstrap(params, config, logger=logger).run()
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        print_error(f"Bootstrap failed: {e}")
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        print_error(f"Unhandled error: {e}")
        sys.exit(1)

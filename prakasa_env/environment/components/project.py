"""
The Prakasa project checkout and virtual environment inside WSL.

Layout inside the distribution:
    ~/prakasa          git checkout of the configured repository
    ~/prakasa/venv     virtual environment with the project installed editable

An installed project with upstream commits is reported as a Warning by
``check()`` and brought up to date by ``install()`` with a pull and a
reinstall. A missing project is cloned (or re-cloned when the directory is
not a git checkout) and installed from scratch.
"""

import enum
from typing import List

from prakasa_env.config import (
    APT_TIMEOUT,
    CUDA_BIN_DIR,
    DEFAULT_COMMAND_TIMEOUT,
    GIT_CLONE_TIMEOUT,
    GIT_FETCH_TIMEOUT,
    GIT_PULL_TIMEOUT,
    KEY_PRAKASA_GIT_REPO_URL,
    PROJECT_DEFAULT_BRANCH,
    PROJECT_DIR,
    PROJECT_EXTRAS,
    PROJECT_INSTALL_TIMEOUT,
    PROJECT_PACKAGE,
)
from prakasa_env.environment.components.base import BaseComponent, InstallStep, apt_proxy_args
from prakasa_env.environment.models import (
    ComponentKind,
    ComponentResult,
    EnvironmentRequirements,
    FailureCode,
)
from prakasa_env.execution import Command, chain, quote_bash

ENTER_PROJECT = Command.of("cd", PROJECT_DIR)
ACTIVATE_VENV = "source ./venv/bin/activate"


class CheckoutState(enum.Enum):
    MISSING = "missing"
    GIT = "git"
    NOT_GIT = "not-git"


class ProjectComponent(BaseComponent):
    kind = ComponentKind.PROJECT
    failure_code = FailureCode.PROJECT_MISSING
    requirements = EnvironmentRequirements(need_secondary_os=True, sync_proxy=True)

    @property
    def repo_url(self) -> str:
        if self.context.config is None:
            return ""
        return self.context.config.get_value(KEY_PRAKASA_GIT_REPO_URL)

    # Probes
    def is_installed(self) -> bool:
        """The virtual environment exists and lists the project package."""
        command = chain(ENTER_PROJECT, "[ -d ./venv ]", ACTIVATE_VENV,
                        f"pip list 2>/dev/null | grep -i {quote_bash(PROJECT_PACKAGE)}")
        outcome = self._run_secondary(command)
        return outcome.succeeded and bool(outcome.stdout.strip())

    def has_updates(self) -> bool:
        """Whether origin has commits the checkout does not. Any probe failure counts as no."""
        inside = self._run_secondary(chain(ENTER_PROJECT, "git rev-parse --is-inside-work-tree 2>/dev/null"))
        if not inside.succeeded:
            return False

        fetch = self._run_secondary(
            chain(ENTER_PROJECT, Command.of("git", "fetch", "origin", env={"ALL_PROXY": self.proxy_url})),
            timeout=GIT_FETCH_TIMEOUT,
        )
        if not fetch.succeeded:
            self.logger.debug(f"git fetch failed: {fetch.output}")
            return False

        count = self._run_secondary(
            chain(ENTER_PROJECT, f"git rev-list HEAD...origin/{PROJECT_DEFAULT_BRANCH} --count 2>/dev/null")
        )
        if not count.succeeded:
            return False
        try:
            return int(count.stdout.strip()) > 0
        except ValueError:
            return False

    def inspect_checkout(self) -> CheckoutState:
        directory = quote_bash(PROJECT_DIR)
        script = (
            f"if [ -d {directory}/.git ] && (cd {directory} && git rev-parse --is-inside-work-tree >/dev/null 2>&1); "
            f"then echo git; elif [ -e {directory} ]; then echo not-git; else echo missing; fi"
        )
        outcome = self._run_secondary(script)
        try:
            return CheckoutState(outcome.stdout.strip())
        except ValueError:
            return CheckoutState.MISSING

    def check(self) -> ComponentResult:
        self._log_start("Checking")
        if not self.is_installed():
            result = self._failed("Prakasa project is not installed")
        elif self.has_updates():
            result = self._warning("Prakasa project is installed but has git updates available")
        else:
            result = self._skipped("Prakasa project is installed and up to date")
        self._log_result("Checking", result)
        return result

    # Install steps
    def _pull_step(self) -> InstallStep:
        return InstallStep(
            "update_prakasa",
            chain(ENTER_PROJECT, Command.of("git", "pull", env={"ALL_PROXY": self.proxy_url})),
            GIT_PULL_TIMEOUT,
        )

    def _clone_step(self) -> InstallStep:
        return InstallStep(
            "clone_prakasa",
            chain(Command.of("cd", "~"),
                  Command.of("git", "clone", self.repo_url, PROJECT_DIR, env={"ALL_PROXY": self.proxy_url})),
            GIT_CLONE_TIMEOUT,
        )

    def _install_base_step(self) -> InstallStep:
        proxy = self.proxy_url
        pip_install = Command.of("pip", "install", "-e", PROJECT_EXTRAS,
                                 env={"HTTP_PROXY": proxy, "HTTPS_PROXY": proxy})
        return InstallStep(
            "install_prakasa_base",
            chain(ENTER_PROJECT, "([ -d ./venv ] || python3 -m venv ./venv)", ACTIVATE_VENV, pip_install),
            PROJECT_INSTALL_TIMEOUT,
            streamed=True,
        )

    def update_steps(self) -> List[InstallStep]:
        return [self._pull_step(), self._install_base_step()]

    def fresh_install_steps(self, state: CheckoutState) -> List[InstallStep]:
        steps = []
        if state is CheckoutState.GIT:
            steps.append(self._pull_step())
        else:
            if state is CheckoutState.NOT_GIT:
                steps.append(InstallStep("remove_old_prakasa", Command.of("rm", "-rf", PROJECT_DIR), 60))
            steps.append(self._clone_step())

        export_cuda = f"export PATH={CUDA_BIN_DIR}:$PATH"
        steps.extend([
            InstallStep(
                "install_python3_venv",
                chain(Command.of("apt", *apt_proxy_args(self.proxy_url), "update"),
                      Command.of("apt-get", *apt_proxy_args(self.proxy_url), "install", "-y", "python3-venv",
                                 env={"DEBIAN_FRONTEND": "noninteractive"})),
                APT_TIMEOUT,
            ),
            self._install_base_step(),
            InstallStep(
                "add_cuda_env",
                f"grep -q {quote_bash(CUDA_BIN_DIR)} ~/.bashrc || echo {quote_bash(export_cuda)} >> ~/.bashrc",
                DEFAULT_COMMAND_TIMEOUT,
            ),
        ])
        return steps

    def _install(self) -> ComponentResult:
        installed = self.is_installed()
        if installed and not self.has_updates():
            return self._skipped("Prakasa project is installed and up to date")

        if installed:
            self.logger.status("Updating Prakasa project from git")
            steps = self.update_steps()
            verb, noun = "updated", "update"
        else:
            if not self.repo_url:
                return self._failed(f"No repository configured, set '{KEY_PRAKASA_GIT_REPO_URL}' first")
            state = self.inspect_checkout()
            self.logger.debug(f"Existing checkout state: {state.value}")
            steps = self.fresh_install_steps(state)
            verb, noun = "installed", "installation"

        failure = self._execute_steps(steps, "Prakasa project")
        if failure is not None:
            return failure

        if not self.is_installed():
            return self._failed(f"Prakasa project {noun} completed but verification failed")
        return self._success(f"Prakasa project {verb} successfully")

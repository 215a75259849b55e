#
# Helper scripts in the kiosk user's home
#
from ..const import const
from ..config.config_tasks import task_write_file


diagnose_template = '''#!/bin/sh
# Generated by pi-kiosk. Prints the kiosk's health.
exec {python} -m pi_kiosk.bin.diagnose "$@"
'''

manual_test_template = '''#!/bin/sh
# Generated by pi-kiosk.
# Stops the browser service and runs the browser launcher once in the
# foreground, inside the running compositor. Ctrl-C ends the test.
export XDG_RUNTIME_DIR="${{XDG_RUNTIME_DIR:-/run/user/$(id -u)}}"
export WAYLAND_DISPLAY="${{WAYLAND_DISPLAY:-{wayland_display}}}"

echo "Stopping {browser_service}..."
sudo systemctl stop {browser_service}

trap 'echo "Starting {browser_service}..."; sudo systemctl start {browser_service}' EXIT
{python} -m pi_kiosk.bin.launch_browser --max-retries 1 "$@"
'''


def install_helpers_tasks(context):
  config = context.config
  owner = context.owner
  return [
    task_write_file("Write diagnostic helper", context.home_path('kiosk-diagnose.sh'),
                    diagnose_template.format(python=config.PYTHON), mode=0o755, owner=owner),
    task_write_file("Write manual test helper", context.home_path('kiosk-test.sh'),
                    manual_test_template.format(python=config.PYTHON,
                                                wayland_display=config.WAYLAND_DISPLAY,
                                                browser_service=const.browser_service),
                    mode=0o755, owner=owner),
  ]

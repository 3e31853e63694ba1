"""
Build script for creating the Media Shelf executable with PyInstaller.

Also provides a development launcher with the same Qt environment.
"""
import PyInstaller.__main__
from pathlib import Path
import sys
import os

APP_NAME = "MediaShelf"

# Qt environment variables to suppress transient window artifacts on Windows
QT_ENV_VARS = {
    'QT_AUTO_SCREEN_SCALE_FACTOR': '0',
    'QT_QPA_PLATFORM': 'windows:darkmode=1,nodrawtext=0',
}


def create_runtime_hook(project_root: Path) -> Path:
    """Create a PyInstaller runtime hook to set Qt environment variables."""
    hooks_dir = project_root / "build_hooks"
    hooks_dir.mkdir(exist_ok=True)

    hook_path = hooks_dir / "hook-qt-env.py"
    hook_content = '''"""
PyInstaller runtime hook to configure Qt environment for Windows.
"""
import os
import sys

os.environ.setdefault('QT_AUTO_SCREEN_SCALE_FACTOR', '0')

if sys.platform == 'win32':
    # Dark title bar even if QT_QPA_PLATFORM is set externally
    os.environ['QT_QPA_PLATFORM'] = 'windows:darkmode=1,nodrawtext=0'
'''
    hook_path.write_text(hook_content)
    return hook_path


def setup_dev_environment():
    if sys.platform == 'win32':
        for key, value in QT_ENV_VARS.items():
            os.environ.setdefault(key, value)


def run_dev():
    """Run the application in development mode."""
    print("Starting in development mode...")
    setup_dev_environment()

    project_root = Path(__file__).parent
    sys.path.insert(0, str(project_root))

    import main
    main.main()


def _pyinstaller_options(project_root: Path, hook_path: Path = None) -> list:
    resources_dir = project_root / "resources"
    resources_dir.mkdir(exist_ok=True)

    icon_path = resources_dir / "icon.ico"
    if not icon_path.exists():
        print("Warning: icon.ico not found, using default")
    icon_arg = [f'--icon={icon_path}'] if icon_path.exists() else []
    hook_arg = [f'--runtime-hook={hook_path}'] if hook_path else []

    # onedir keeps QtWebEngineProcess and its resources next to the exe
    return [
        'main.py',
        f'--name={APP_NAME}',
        '--windowed',
        '--onedir',
        *icon_arg,
        f'--add-data=resources{os.pathsep}resources',
        *hook_arg,
        '--hidden-import=PyQt6.QtWebEngineWidgets',
        '--hidden-import=PyQt6.QtWebEngineCore',
        '--hidden-import=qasync',
        '--collect-all=qtawesome',
        '--clean',
        f'--distpath={project_root / "dist"}',
        f'--workpath={project_root / "build"}',
        f'--specpath={project_root}',
    ]


def build(with_hook: bool = True):
    """Build executable with PyInstaller"""
    project_root = Path(__file__).parent

    hook_path = None
    if with_hook:
        hook_path = create_runtime_hook(project_root)
        print(f"Created runtime hook: {hook_path}")

    print(f"Building executable (onedir mode{'' if with_hook else ', no runtime hook'})...")
    PyInstaller.__main__.run(_pyinstaller_options(project_root, hook_path))

    print("Build complete!")
    print(f"Output folder: {project_root / 'dist' / APP_NAME}")


def print_usage():
    print(f"""
Media Shelf Build Script
========================

Usage:
    python build.py              - Build the executable with runtime hook (onedir)
    python build.py --no-hook    - Build without runtime hook (for debugging)
    python build.py --dev        - Run in development mode
    python build.py --help       - Show this help message

Build Output:
    dist/{APP_NAME}/ containing the executable, Qt WebEngine and all
    dependencies.
""")


if __name__ == '__main__':
    if len(sys.argv) > 1:
        arg = sys.argv[1].lower()
        if arg in ('--dev', '-d', 'dev'):
            run_dev()
        elif arg in ('--no-hook', '--nohook'):
            build(with_hook=False)
        elif arg in ('--help', '-h', 'help'):
            print_usage()
        else:
            print(f"Unknown argument: {arg}")
            print_usage()
            sys.exit(1)
    else:
        build()

"""Command line interface for testing configuration loading"""
import argparse

from . import get_settings_conf

SECRET_KEYS = {'password', 'secret_key'}

def main():
    """Display loaded configuration"""
    parser = argparse.ArgumentParser(description="Show the effective marketplace settings")
    parser.add_argument('--config', help="Path to settings.conf")
    args = parser.parse_args()

    settings_conf = get_settings_conf(args.config)

    print("\nSettings Configuration:")
    print("-" * 50)
    for section, values in settings_conf.items():
        print(f"[{section}]")
        for key, value in values.items():
            if key in SECRET_KEYS and value:
                value = '********'
            print(f"{key}: {value}")
        print()

if __name__ == "__main__":
    main()

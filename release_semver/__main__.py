from release_semver.cli.app import main

main()

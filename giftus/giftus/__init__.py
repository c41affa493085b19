import os

# MySQL через PyMySQL, если так настроено окружение
if os.environ.get("MYSQL_USE_PYMYSQL") == "1" or os.environ.get("DB_ENGINE", "").lower().startswith("mysql"):
    import pymysql

    pymysql.install_as_MySQLdb()

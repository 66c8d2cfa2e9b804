# extensions/database.py
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

# 模型声明用的注册表；与具体 app 的绑定由 EntityStore.init_app 完成
db = SQLAlchemy()
migrate = Migrate()
